"""Tests for SqliteEventSource."""

import sqlite3
from datetime import date, datetime
from pathlib import Path

import pytest

from careerboard.core.db import init_db, record_event, upsert_job
from careerboard.core.schemas import Event, Job
from careerboard.sources.base import EventSource
from careerboard.sources.sqlite_source import SqliteEventSource


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    return init_db(tmp_path / "test.db")


class TestSqliteEventSource:
    def test_is_event_source(self, db: sqlite3.Connection) -> None:
        source = SqliteEventSource(db)
        assert isinstance(source, EventSource)
        assert source.source_id == "sqlite"

    async def test_fetch_events(self, db: sqlite3.Connection) -> None:
        record_event(
            db,
            Event(event_type="link_click", job_id="a", actor_id="s1",
                  occurred_at=datetime(2026, 3, 10, 9, 0)),
        )
        record_event(
            db,
            Event(event_type="link_click", job_id="a", actor_id="s1",
                  occurred_at=datetime(2026, 2, 1, 9, 0)),
        )
        source = SqliteEventSource(db)
        events = await source.fetch_events(
            "link_click", date_range=(date(2026, 3, 1), date(2026, 3, 31)),
        )
        assert len(events) == 1
        assert events[0].job_id == "a"

    async def test_fetch_jobs(self, db: sqlite3.Connection) -> None:
        upsert_job(db, Job(id="a", title="x", status="active", created_by="f1"))
        upsert_job(db, Job(id="b", title="y", status="pending", created_by="f2"))
        source = SqliteEventSource(db)
        assert [j.id for j in await source.fetch_jobs(created_by="f2")] == ["b"]
        assert [j.id for j in await source.fetch_jobs(status="active")] == ["a"]

    async def test_empty_store(self, db: sqlite3.Connection) -> None:
        source = SqliteEventSource(db)
        assert await source.fetch_jobs() == []
        assert await source.fetch_events("job_view") == []
