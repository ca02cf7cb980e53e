"""Tests for the database layer: init, job upsert, event recording, range reads."""

import sqlite3
from datetime import date, datetime, timedelta, timezone

import pytest

from careerboard.core.db import (
    fetch_events,
    fetch_jobs,
    init_db,
    record_event,
    remove_save,
    upsert_job,
)
from careerboard.core.schemas import Event, Job


def _job(job_id: str = "job-1", **kw: object) -> Job:
    defaults: dict[str, object] = {
        "id": job_id,
        "title": "Data Analyst Intern",
        "company": "Acme",
        "status": "active",
        "created_by": "faculty-1",
        "created_at": datetime(2026, 3, 1, 9, 0),
    }
    defaults.update(kw)
    return Job(**defaults)  # type: ignore[arg-type]


def _event(
    event_type: str = "job_view",
    job_id: str = "job-1",
    actor_id: str | None = "s1",
    occurred_at: datetime = datetime(2026, 3, 10, 12, 0),
) -> Event:
    return Event(
        event_type=event_type,  # type: ignore[arg-type]
        job_id=job_id,
        actor_id=actor_id,
        occurred_at=occurred_at,
    )


@pytest.fixture()
def db(tmp_path) -> sqlite3.Connection:  # type: ignore[no-untyped-def]
    return init_db(tmp_path / "test.db")


class TestInitDb:
    def test_creates_tables(self, db: sqlite3.Connection) -> None:
        tables = {
            row[0]
            for row in db.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        }
        assert "jobs" in tables
        assert "events" in tables

    def test_idempotent(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        p = tmp_path / "double.db"
        init_db(p).close()
        init_db(p).close()

    def test_creates_parent_dir(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        conn = init_db(tmp_path / "nested" / "dir" / "test.db")
        conn.close()
        assert (tmp_path / "nested" / "dir" / "test.db").exists()


class TestUpsertJob:
    def test_round_trip_fields(self, db: sqlite3.Connection) -> None:
        job = _job(deadline=date(2026, 5, 1), skills=["SQL", "Python"], job_type="Internship")
        upsert_job(db, job)
        [stored] = fetch_jobs(db)
        assert stored == job

    def test_update_existing(self, db: sqlite3.Connection) -> None:
        upsert_job(db, _job(status="pending"))
        upsert_job(db, _job(status="active"))
        jobs = fetch_jobs(db)
        assert len(jobs) == 1
        assert jobs[0].status == "active"

    def test_aware_created_at_stored_as_utc(self, db: sqlite3.Connection) -> None:
        eastern = timezone(timedelta(hours=-5))
        upsert_job(db, _job(created_at=datetime(2026, 3, 1, 22, 0, tzinfo=eastern)))
        [stored] = fetch_jobs(db)
        assert stored.created_at == datetime(2026, 3, 2, 3, 0)


class TestFetchJobs:
    def test_filters(self, db: sqlite3.Connection) -> None:
        upsert_job(db, _job("a", status="active", created_by="f1"))
        upsert_job(db, _job("b", status="pending", created_by="f1"))
        upsert_job(db, _job("c", status="active", created_by="r2"))
        assert {j.id for j in fetch_jobs(db, status="active")} == {"a", "c"}
        assert {j.id for j in fetch_jobs(db, created_by="f1")} == {"a", "b"}
        assert [j.id for j in fetch_jobs(db, status="active", created_by="f1")] == ["a"]

    def test_empty(self, db: sqlite3.Connection) -> None:
        assert fetch_jobs(db) == []


class TestRecordEvent:
    def test_returns_row_id(self, db: sqlite3.Connection) -> None:
        assert record_event(db, _event()) >= 1

    def test_anonymous_view_kept(self, db: sqlite3.Connection) -> None:
        record_event(db, _event(actor_id=None))
        [event] = fetch_events(db, "job_view")
        assert event.actor_id is None

    def test_application_status_kept(self, db: sqlite3.Connection) -> None:
        record_event(
            db,
            Event(
                event_type="application",
                job_id="job-1",
                actor_id="s1",
                occurred_at=datetime(2026, 3, 10),
                status="applied",
            ),
        )
        [event] = fetch_events(db, "application")
        assert event.status == "applied"


class TestFetchEvents:
    def test_filters_by_type(self, db: sqlite3.Connection) -> None:
        record_event(db, _event("job_view"))
        record_event(db, _event("link_click"))
        assert len(fetch_events(db, "job_view")) == 1
        assert len(fetch_events(db, "link_click")) == 1
        assert fetch_events(db, "save") == []

    def test_date_range_is_inclusive_by_day(self, db: sqlite3.Connection) -> None:
        record_event(db, _event(occurred_at=datetime(2026, 3, 7, 23, 59, 59)))
        record_event(db, _event(occurred_at=datetime(2026, 3, 8, 0, 0)))
        record_event(db, _event(occurred_at=datetime(2026, 3, 14, 23, 59, 59)))
        record_event(db, _event(occurred_at=datetime(2026, 3, 15, 0, 0)))
        events = fetch_events(db, "job_view", date_range=(date(2026, 3, 8), date(2026, 3, 14)))
        assert len(events) == 2

    def test_job_ids_filter(self, db: sqlite3.Connection) -> None:
        record_event(db, _event(job_id="a"))
        record_event(db, _event(job_id="b"))
        record_event(db, _event(job_id="c"))
        events = fetch_events(db, "job_view", job_ids=["a", "c"])
        assert {e.job_id for e in events} == {"a", "c"}

    def test_empty_job_ids_match_nothing(self, db: sqlite3.Connection) -> None:
        record_event(db, _event(job_id="a"))
        assert fetch_events(db, "job_view", job_ids=[]) == []


class TestRemoveSave:
    def test_removes_only_matching_save(self, db: sqlite3.Connection) -> None:
        record_event(db, _event("save", job_id="a", actor_id="s1"))
        record_event(db, _event("save", job_id="a", actor_id="s2"))
        record_event(db, _event("job_view", job_id="a", actor_id="s1"))
        assert remove_save(db, "a", "s1") is True
        saves = fetch_events(db, "save")
        assert [e.actor_id for e in saves] == ["s2"]
        assert len(fetch_events(db, "job_view")) == 1

    def test_missing_save(self, db: sqlite3.Connection) -> None:
        assert remove_save(db, "a", "s1") is False
