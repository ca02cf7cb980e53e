"""Core data models for the career-board analytics engine."""

from datetime import date, datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

JobStatus = Literal["pending", "active", "rejected", "removed", "archived"]
EventType = Literal["job_view", "link_click", "save", "application"]
ApplicationStatus = Literal["applied", "viewed", "interview", "hired", "rejected"]

EVENT_TYPES: tuple[EventType, ...] = ("job_view", "link_click", "save", "application")


class Job(BaseModel):
    """A posted opportunity as stored by the event store."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    company: str = ""
    job_type: str = ""
    industry: str = ""
    status: JobStatus = "pending"
    deadline: date | None = None
    created_by: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    skills: list[str] = Field(default_factory=list)


class Event(BaseModel):
    """One immutable engagement event against a job.

    ``actor_id`` is None for anonymous views. ``status`` is only set on
    application events.
    """

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    job_id: str
    actor_id: str | None = None
    occurred_at: datetime
    status: ApplicationStatus | None = None


class DailyBucket(BaseModel):
    """Event count for a single calendar day."""

    model_config = ConfigDict(frozen=True)

    date: date
    count: int = Field(default=0, ge=0)


class UniqueCount(BaseModel):
    """Raw event total alongside the number of distinct non-null actors."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(ge=0)
    unique: int = Field(ge=0)

    @model_validator(mode="after")
    def unique_within_total(self) -> "UniqueCount":
        if self.unique > self.total:
            msg = f"unique ({self.unique}) cannot exceed total ({self.total})"
            raise ValueError(msg)
        return self


class JobCounts(BaseModel):
    """Per-job engagement counts built by the aggregator."""

    model_config = ConfigDict(frozen=True)

    views: int = Field(default=0, ge=0)
    unique_views: int = Field(default=0, ge=0)
    clicks: int = Field(default=0, ge=0)
    unique_clicks: int = Field(default=0, ge=0)
    saves: int = Field(default=0, ge=0)
    applications: int = Field(default=0, ge=0)


class EngagementInput(BaseModel):
    """Inputs to the composite engagement score."""

    model_config = ConfigDict(frozen=True)

    unique_views: int = Field(default=0, ge=0)
    unique_clicks: int = Field(default=0, ge=0)
    saves: int = Field(default=0, ge=0)
    days_active: int = Field(default=1, ge=1)


class ScoredJob(BaseModel):
    """A job paired with its counts and composite engagement score."""

    model_config = ConfigDict(frozen=True)

    job: Job
    counts: JobCounts
    days_active: int = Field(ge=1)
    click_through_rate: float = Field(ge=0.0)
    daily_rate: float = Field(ge=0.0)
    score: float = Field(ge=0.0)


class LeaderboardEntry(BaseModel):
    """One ranked row of a leaderboard."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    title: str
    company: str = ""
    score: float
    rank: int = Field(ge=1)
    unique_views: int = 0
    unique_clicks: int = 0
    saves: int = 0


class Funnel(BaseModel):
    """Linear views -> clicks -> completions conversion percentages.

    Values may exceed 100 when later stages are not strict subsets of
    earlier ones.
    """

    model_config = ConfigDict(frozen=True)

    view_to_click: float = Field(ge=0.0)
    click_to_completion: float = Field(ge=0.0)
    overall: float = Field(ge=0.0)


class TrendPoint(BaseModel):
    """Multi-series daily trend entry."""

    model_config = ConfigDict(frozen=True)

    date: date
    views: int = 0
    clicks: int = 0
    postings: int = 0


class EngagementTierCount(BaseModel):
    """How many jobs fall into an engagement tier."""

    model_config = ConfigDict(frozen=True)

    tier: Literal["high", "medium", "low", "none"]
    count: int = Field(ge=0)
    percentage: float = Field(ge=0.0)


class Overview(BaseModel):
    """Headline totals for a set of jobs over a reporting window."""

    total_jobs: int = 0
    total_clicks: int = 0
    total_views: int = 0
    unique_views: int = 0
    average_clicks_per_job: float = 0.0
    engagement_rate: float = 0.0
    active_jobs: int = 0
    expired_jobs: int = 0
    pending_jobs: int = 0
    approval_rate: float = 0.0
    average_days_to_first_click: float = 0.0


class PlatformStats(BaseModel):
    """Platform-wide reach and conversion figures."""

    total_views: int = 0
    unique_viewers: int = 0
    total_clicks: int = 0
    unique_users_clicking: int = 0
    total_saves: int = 0
    active_jobs: int = 0
    average_click_rate: float = 0.0
    average_save_rate: float = 0.0


class JobTypeShare(BaseModel):
    """Share of postings and clicks for one job type."""

    job_type: str
    count: int
    percentage: float
    clicks: int = 0


class SkillStat(BaseModel):
    """Engagement figures for jobs requiring a given skill."""

    skill: str
    job_count: int
    average_views_per_job: float
    engagement_rate: float
