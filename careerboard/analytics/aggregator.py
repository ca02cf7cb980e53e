"""Event aggregation: daily buckets, unique-actor counts, per-job summaries.

Every function here is pure: inputs are already-fetched rows, outputs are
freshly built values. Timestamps are bucketed by their UTC calendar date;
naive datetimes are taken to be UTC already.
"""

import logging
from collections import defaultdict
from collections.abc import Callable, Hashable, Iterable
from datetime import date, datetime, timedelta, timezone
from typing import TypeVar

from careerboard.core.schemas import DailyBucket, Event, Job, JobCounts, TrendPoint, UniqueCount

logger = logging.getLogger(__name__)

T = TypeVar("T")

SECONDS_PER_DAY = 24 * 60 * 60


def to_utc_naive(value: datetime) -> datetime:
    """Normalise a timestamp to naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def calendar_date(value: datetime) -> date:
    """Return the UTC calendar date of a timestamp."""
    return to_utc_naive(value).date()


def _occurred_at(event: Event) -> datetime:
    return event.occurred_at


def _actor_id(event: Event) -> str | None:
    return event.actor_id


def bucket_by_day(
    events: Iterable[T],
    start: date,
    end: date,
    timestamp: Callable[[T], datetime] = _occurred_at,  # type: ignore[assignment]
) -> list[DailyBucket]:
    """Count events per calendar day over ``[start, end]`` inclusive.

    Args:
        events: Rows to bucket; any type ``timestamp`` can read.
        start: First day of the range.
        end: Last day of the range.
        timestamp: Extracts the timestamp of a row (default: ``occurred_at``).

    Returns:
        One DailyBucket per day in ascending order, zero-filled, of length
        ``(end - start).days + 1``. Events outside the range are ignored.

    Raises:
        ValueError: If ``start`` is after ``end``.
    """
    if start > end:
        msg = f"start ({start.isoformat()}) must not be after end ({end.isoformat()})"
        raise ValueError(msg)

    span = (end - start).days + 1
    counts = [0] * span
    ignored = 0
    for event in events:
        offset = (calendar_date(timestamp(event)) - start).days
        if 0 <= offset < span:
            counts[offset] += 1
        else:
            ignored += 1

    if ignored:
        logger.debug("bucket_by_day: ignored %d events outside %s..%s", ignored, start, end)
    return [
        DailyBucket(date=start + timedelta(days=i), count=count)
        for i, count in enumerate(counts)
    ]


def count_unique(
    events: Iterable[T],
    key_fn: Callable[[T], Hashable | None] = _actor_id,  # type: ignore[assignment]
) -> UniqueCount:
    """Count events and distinct non-null keys.

    Events whose key is None still count toward ``total`` but never toward
    ``unique``.
    """
    total = 0
    keys: set[Hashable] = set()
    for event in events:
        total += 1
        key = key_fn(event)
        if key is not None:
            keys.add(key)
    return UniqueCount(total=total, unique=len(keys))


def group_by_job(events: Iterable[Event]) -> dict[str, list[Event]]:
    """Partition events by job id. Jobs without events are absent."""
    grouped: dict[str, list[Event]] = defaultdict(list)
    for event in events:
        grouped[event.job_id].append(event)
    return dict(grouped)


def count_by_job(events: Iterable[Event]) -> dict[str, JobCounts]:
    """Build per-job engagement counts from a mixed stream of events.

    Anonymous views count toward ``views`` but not ``unique_views``. Jobs
    without events are absent.
    """
    result: dict[str, JobCounts] = {}
    for job_id, job_events in group_by_job(events).items():
        by_type: dict[str, list[Event]] = defaultdict(list)
        for event in job_events:
            by_type[event.event_type].append(event)
        views = count_unique(by_type["job_view"])
        clicks = count_unique(by_type["link_click"])
        result[job_id] = JobCounts(
            views=views.total,
            unique_views=views.unique,
            clicks=clicks.total,
            unique_clicks=clicks.unique,
            saves=len(by_type["save"]),
            applications=len(by_type["application"]),
        )
    return result


def build_trends(
    views: Iterable[Event],
    clicks: Iterable[Event],
    jobs: Iterable[Job],
    start: date,
    end: date,
) -> list[TrendPoint]:
    """Daily views, clicks and new postings over ``[start, end]``."""
    view_buckets = bucket_by_day(views, start, end)
    click_buckets = bucket_by_day(clicks, start, end)
    posting_buckets = bucket_by_day(jobs, start, end, timestamp=lambda job: job.created_at)
    return [
        TrendPoint(date=v.date, views=v.count, clicks=c.count, postings=p.count)
        for v, c, p in zip(view_buckets, click_buckets, posting_buckets, strict=True)
    ]


def days_active(created_at: datetime, now: datetime) -> int:
    """Whole days since a job was posted, never less than 1."""
    elapsed = (to_utc_naive(now) - to_utc_naive(created_at)).total_seconds()
    return max(1, int(elapsed // SECONDS_PER_DAY))
