"""SQLite database layer for jobs and engagement events."""

import json
import logging
import sqlite3
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

from careerboard.core.schemas import Event, EventType, Job, JobStatus

logger = logging.getLogger(__name__)

_JOBS_TABLE = """
CREATE TABLE IF NOT EXISTS jobs (
    id          TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    company     TEXT NOT NULL DEFAULT '',
    job_type    TEXT NOT NULL DEFAULT '',
    industry    TEXT NOT NULL DEFAULT '',
    status      TEXT NOT NULL DEFAULT 'pending',
    deadline    TEXT,
    created_by  TEXT,
    created_at  TEXT NOT NULL,
    skills_json TEXT NOT NULL DEFAULT '[]'
);
"""

_EVENTS_TABLE = """
CREATE TABLE IF NOT EXISTS events (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    event_type  TEXT NOT NULL,
    job_id      TEXT NOT NULL,
    actor_id    TEXT,
    occurred_at TEXT NOT NULL,
    status      TEXT
);
"""

_EVENTS_INDEX = """
CREATE INDEX IF NOT EXISTS idx_events_type_time ON events (event_type, occurred_at);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_JOBS_TABLE)
    conn.execute(_EVENTS_TABLE)
    conn.execute(_EVENTS_INDEX)
    conn.commit()
    return conn


def _to_utc_text(value: datetime) -> str:
    """Serialise a timestamp as naive UTC ISO text so range filters compare lexically."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat()


def upsert_job(conn: sqlite3.Connection, job: Job) -> None:
    """Insert a job or replace the stored row with the same id."""
    conn.execute(
        """
        INSERT INTO jobs
            (id, title, company, job_type, industry, status, deadline,
             created_by, created_at, skills_json)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            title = excluded.title,
            company = excluded.company,
            job_type = excluded.job_type,
            industry = excluded.industry,
            status = excluded.status,
            deadline = excluded.deadline,
            created_by = excluded.created_by,
            created_at = excluded.created_at,
            skills_json = excluded.skills_json
        """,
        (
            job.id,
            job.title,
            job.company,
            job.job_type,
            job.industry,
            job.status,
            job.deadline.isoformat() if job.deadline else None,
            job.created_by,
            _to_utc_text(job.created_at),
            json.dumps(job.skills),
        ),
    )
    conn.commit()


def record_event(conn: sqlite3.Connection, event: Event) -> int:
    """Append an event row. Returns the row ID."""
    cursor = conn.execute(
        """
        INSERT INTO events (event_type, job_id, actor_id, occurred_at, status)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            event.event_type,
            event.job_id,
            event.actor_id,
            _to_utc_text(event.occurred_at),
            event.status,
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def remove_save(conn: sqlite3.Connection, job_id: str, actor_id: str) -> bool:
    """Delete a student's bookmark. Returns True if a save row was removed."""
    cursor = conn.execute(
        "DELETE FROM events WHERE event_type = 'save' AND job_id = ? AND actor_id = ?",
        (job_id, actor_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def fetch_events(
    conn: sqlite3.Connection,
    event_type: EventType,
    date_range: tuple[date, date] | None = None,
    job_ids: list[str] | None = None,
) -> list[Event]:
    """Return events of one type, optionally limited to a date range and jobs.

    The date range is inclusive on both calendar days. An empty ``job_ids``
    list matches nothing.
    """
    if job_ids is not None and not job_ids:
        return []

    clauses = ["event_type = ?"]
    params: list[object] = [event_type]
    if date_range is not None:
        start, end = date_range
        clauses.append("occurred_at >= ? AND occurred_at < ?")
        params.append(datetime.combine(start, time.min).isoformat())
        params.append(datetime.combine(end + timedelta(days=1), time.min).isoformat())
    if job_ids is not None:
        placeholders = ", ".join("?" for _ in job_ids)
        clauses.append(f"job_id IN ({placeholders})")
        params.extend(job_ids)

    rows = conn.execute(
        f"SELECT * FROM events WHERE {' AND '.join(clauses)}",  # noqa: S608
        params,
    ).fetchall()
    logger.debug("fetch_events(%s): %d rows", event_type, len(rows))
    return [
        Event(
            event_type=row["event_type"],
            job_id=row["job_id"],
            actor_id=row["actor_id"],
            occurred_at=datetime.fromisoformat(row["occurred_at"]),
            status=row["status"],
        )
        for row in rows
    ]


def fetch_jobs(
    conn: sqlite3.Connection,
    status: JobStatus | None = None,
    created_by: str | None = None,
) -> list[Job]:
    """Return jobs, optionally filtered by status and poster."""
    clauses: list[str] = []
    params: list[object] = []
    if status is not None:
        clauses.append("status = ?")
        params.append(status)
    if created_by is not None:
        clauses.append("created_by = ?")
        params.append(created_by)

    query = "SELECT * FROM jobs"
    if clauses:
        query += f" WHERE {' AND '.join(clauses)}"
    rows = conn.execute(query, params).fetchall()
    return [
        Job(
            id=row["id"],
            title=row["title"],
            company=row["company"],
            job_type=row["job_type"],
            industry=row["industry"],
            status=row["status"],
            deadline=date.fromisoformat(row["deadline"]) if row["deadline"] else None,
            created_by=row["created_by"],
            created_at=datetime.fromisoformat(row["created_at"]),
            skills=json.loads(row["skills_json"]),
        )
        for row in rows
    ]
