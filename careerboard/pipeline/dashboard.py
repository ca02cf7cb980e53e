"""Dashboard pipeline: fetch, aggregate, score, and assemble reports.

Data flow:
  1. Fetch jobs, then every event stream concurrently
  2. Aggregate per-job counts and daily trends
  3. Score and rank active jobs
  4. Funnel, tiers, and breakdowns
  5. Export (JSON or CSV)
"""

import asyncio
import csv
import io
import json
import logging
from datetime import date, datetime, timedelta, timezone

from pydantic import BaseModel, Field

from careerboard.analytics.aggregator import build_trends, calendar_date, count_by_job
from careerboard.analytics.breakdown import (
    job_type_distribution,
    overview,
    platform_stats,
    skill_stats,
)
from careerboard.analytics.funnel import compute_funnel, growth_percentage
from careerboard.analytics.scorer import engagement_tiers, leaderboard, score_jobs
from careerboard.core.config import RankMetric, Settings
from careerboard.core.schemas import (
    EngagementTierCount,
    Event,
    Funnel,
    Job,
    JobTypeShare,
    LeaderboardEntry,
    Overview,
    PlatformStats,
    SkillStat,
    TrendPoint,
)
from careerboard.sources.base import EventSource

logger = logging.getLogger(__name__)


class DashboardInputs(BaseModel):
    """Everything fetched from the event source for one report."""

    jobs: list[Job]
    views: list[Event]
    clicks: list[Event]
    saves: list[Event]
    applications: list[Event]
    previous_applications: list[Event] = Field(default_factory=list)


class DashboardReport(BaseModel):
    """Plain-data report handed to whatever presents it."""

    start: date
    end: date
    generated_at: datetime
    metric: RankMetric
    overview: Overview
    trends: list[TrendPoint]
    leaderboard: list[LeaderboardEntry]
    funnel: Funnel
    engagement_tiers: list[EngagementTierCount]
    job_types: list[JobTypeShare]
    skills: list[SkillStat]
    platform: PlatformStats
    jobs_growth: float
    applications_growth: float


def report_window(end: date, days: int) -> tuple[date, date]:
    """Return the inclusive ``[start, end]`` range covering the last ``days`` days."""
    if days < 1:
        msg = f"days must be at least 1, got {days}"
        raise ValueError(msg)
    return end - timedelta(days=days - 1), end


def previous_window(start: date, end: date) -> tuple[date, date]:
    """Return the equally long range that ends the day before ``start``."""
    return start - (end - start) - timedelta(days=1), start - timedelta(days=1)


async def fetch_inputs(
    source: EventSource,
    start: date,
    end: date,
    created_by: str | None = None,
) -> DashboardInputs:
    """Fetch jobs, then all event streams for them concurrently.

    When ``created_by`` is given, events are restricted to that poster's jobs.
    """
    jobs = await source.fetch_jobs(created_by=created_by)
    job_ids = [j.id for j in jobs] if created_by is not None else None
    window = (start, end)
    previous = previous_window(start, end)

    views, clicks, saves, applications, previous_applications = await asyncio.gather(
        source.fetch_events("job_view", date_range=window, job_ids=job_ids),
        source.fetch_events("link_click", date_range=window, job_ids=job_ids),
        source.fetch_events("save", date_range=window, job_ids=job_ids),
        source.fetch_events("application", date_range=window, job_ids=job_ids),
        source.fetch_events("application", date_range=previous, job_ids=job_ids),
    )
    logger.info(
        "Fetched %d jobs, %d views, %d clicks, %d saves, %d applications from %s",
        len(jobs), len(views), len(clicks), len(saves), len(applications), source.source_id,
    )
    return DashboardInputs(
        jobs=jobs,
        views=views,
        clicks=clicks,
        saves=saves,
        applications=applications,
        previous_applications=previous_applications,
    )


def assemble_report(
    inputs: DashboardInputs,
    settings: Settings,
    start: date,
    end: date,
    now: datetime,
    metric: RankMetric | None = None,
    top_n: int | None = None,
) -> DashboardReport:
    """Run the pure aggregation and scoring steps over fetched inputs."""
    if metric is None:
        metric = settings.report.metric
    if top_n is None:
        top_n = settings.report.top_n
    jobs = inputs.jobs

    counts = count_by_job([*inputs.views, *inputs.clicks, *inputs.saves, *inputs.applications])
    scored = score_jobs(jobs, counts, now, settings.scoring)

    previous_start, previous_end = previous_window(start, end)
    jobs_now = sum(1 for j in jobs if start <= calendar_date(j.created_at) <= end)
    jobs_before = sum(
        1 for j in jobs if previous_start <= calendar_date(j.created_at) <= previous_end
    )

    return DashboardReport(
        start=start,
        end=end,
        generated_at=now,
        metric=metric,
        overview=overview(jobs, inputs.views, inputs.clicks, calendar_date(now)),
        trends=build_trends(inputs.views, inputs.clicks, jobs, start, end),
        leaderboard=leaderboard(scored, metric, top_n),
        funnel=compute_funnel(
            len(inputs.views), len(inputs.clicks), len(inputs.applications),
        ),
        engagement_tiers=engagement_tiers(jobs, counts, settings.tiers),
        job_types=job_type_distribution(jobs, inputs.clicks),
        skills=skill_stats(jobs, inputs.views, inputs.clicks),
        platform=platform_stats(jobs, inputs.views, inputs.clicks, inputs.saves),
        jobs_growth=growth_percentage(jobs_now, jobs_before),
        applications_growth=growth_percentage(
            len(inputs.applications), len(inputs.previous_applications),
        ),
    )


async def build_dashboard(
    source: EventSource,
    settings: Settings,
    start: date,
    end: date,
    now: datetime | None = None,
    created_by: str | None = None,
    metric: RankMetric | None = None,
    top_n: int | None = None,
) -> DashboardReport:
    """Fetch everything for ``[start, end]`` and build the dashboard report.

    Raises:
        ValueError: If ``start`` is after ``end``.
    """
    if start > end:
        msg = f"start ({start.isoformat()}) must not be after end ({end.isoformat()})"
        raise ValueError(msg)
    now = now or datetime.now(timezone.utc)
    inputs = await fetch_inputs(source, start, end, created_by=created_by)
    report = assemble_report(inputs, settings, start, end, now, metric=metric, top_n=top_n)
    logger.info(
        "Dashboard %s..%s: %d jobs, %d on leaderboard",
        start, end, report.overview.total_jobs, len(report.leaderboard),
    )
    return report


def export_report_json(report: DashboardReport) -> str:
    """Export a report as a JSON string."""
    return json.dumps(report.model_dump(mode="json"), indent=2)


def export_report_csv(report: DashboardReport) -> str:
    """Export summary metrics, the daily series and the leaderboard as CSV."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    writer.writerow(["Summary Metrics"])
    writer.writerow(["Metric", "Value"])
    for name, value in report.overview.model_dump().items():
        writer.writerow([name, value])
    writer.writerow(["jobs_growth", round(report.jobs_growth, 1)])
    writer.writerow(["applications_growth", round(report.applications_growth, 1)])
    writer.writerow([])

    writer.writerow(["Time Series"])
    writer.writerow(["date", "views", "clicks", "postings"])
    for point in report.trends:
        writer.writerow([point.date.isoformat(), point.views, point.clicks, point.postings])
    writer.writerow([])

    writer.writerow(["Top Jobs"])
    writer.writerow(["rank", "job_id", "title", "company", "score",
                     "unique_views", "unique_clicks", "saves"])
    for entry in report.leaderboard:
        writer.writerow([
            entry.rank, entry.job_id, entry.title, entry.company,
            round(entry.score, 2), entry.unique_views, entry.unique_clicks, entry.saves,
        ])
    return buffer.getvalue()
