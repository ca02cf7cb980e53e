"""Abstract base class for event sources."""

from abc import ABC, abstractmethod
from datetime import date

from careerboard.core.schemas import Event, EventType, Job, JobStatus


class EventSource(ABC):
    """Read-side interface over the store that owns jobs and events.

    Results carry no ordering guarantee and may be empty.
    """

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Unique identifier for this source (e.g. 'sqlite')."""

    @abstractmethod
    async def fetch_events(
        self,
        event_type: EventType,
        date_range: tuple[date, date] | None = None,
        job_ids: list[str] | None = None,
    ) -> list[Event]:
        """Return events of one type matching the optional filters."""

    @abstractmethod
    async def fetch_jobs(
        self,
        status: JobStatus | None = None,
        created_by: str | None = None,
    ) -> list[Job]:
        """Return jobs matching the optional filters."""
