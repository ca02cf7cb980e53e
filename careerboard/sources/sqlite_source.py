"""EventSource backed by the local SQLite store."""

import sqlite3
from datetime import date

from careerboard.core.db import fetch_events, fetch_jobs
from careerboard.core.schemas import Event, EventType, Job, JobStatus
from careerboard.sources.base import EventSource


class SqliteEventSource(EventSource):
    """Serves jobs and events from a connection opened with ``init_db``."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def source_id(self) -> str:
        return "sqlite"

    async def fetch_events(
        self,
        event_type: EventType,
        date_range: tuple[date, date] | None = None,
        job_ids: list[str] | None = None,
    ) -> list[Event]:
        return fetch_events(self._conn, event_type, date_range=date_range, job_ids=job_ids)

    async def fetch_jobs(
        self,
        status: JobStatus | None = None,
        created_by: str | None = None,
    ) -> list[Job]:
        return fetch_jobs(self._conn, status=status, created_by=created_by)
