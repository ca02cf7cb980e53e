"""Dashboard breakdowns: overview totals, platform stats, job types, skills.

Percentages here are display figures rounded to one decimal, and a zero
denominator yields 0.0 rather than a guarded rate.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Sequence
from datetime import date

from careerboard.analytics.aggregator import (
    SECONDS_PER_DAY,
    count_by_job,
    count_unique,
    to_utc_naive,
)
from careerboard.core.schemas import Event, Job, JobTypeShare, Overview, PlatformStats, SkillStat

logger = logging.getLogger(__name__)

_APPROVED_STATUSES = frozenset({"active", "removed", "archived"})


def _percent(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator * 100, 1)


def _average(total: float, count: int) -> float:
    if count <= 0:
        return 0.0
    return round(total / count, 1)


def _is_active(job: Job, today: date) -> bool:
    return job.status == "active" and (job.deadline is None or job.deadline >= today)


def _average_days_to_first_click(jobs: Sequence[Job], clicks: Sequence[Event]) -> float:
    """Mean whole days (rounded up) from posting to each job's first click.

    Jobs whose first click lands on the posting day are left out.
    """
    first_click: dict[str, Event] = {}
    for click in clicks:
        current = first_click.get(click.job_id)
        if current is None or to_utc_naive(click.occurred_at) < to_utc_naive(current.occurred_at):
            first_click[click.job_id] = click

    total_days = 0
    jobs_with_clicks = 0
    for job in jobs:
        click = first_click.get(job.id)
        if click is None:
            continue
        elapsed = to_utc_naive(click.occurred_at) - to_utc_naive(job.created_at)
        days = math.ceil(elapsed.total_seconds() / SECONDS_PER_DAY)
        if days > 0:
            total_days += days
            jobs_with_clicks += 1
    return _average(total_days, jobs_with_clicks)


def overview(
    jobs: Sequence[Job],
    views: Sequence[Event],
    clicks: Sequence[Event],
    today: date,
) -> Overview:
    """Headline totals for the given jobs and their events."""
    counts = count_by_job([*views, *clicks])
    unique_views = sum(c.unique_views for c in counts.values())
    submitted = [j for j in jobs if j.status != "pending"]
    approved = [j for j in submitted if j.status in _APPROVED_STATUSES]

    return Overview(
        total_jobs=len(jobs),
        total_clicks=len(clicks),
        total_views=len(views),
        unique_views=unique_views,
        average_clicks_per_job=_average(len(clicks), len(jobs)),
        engagement_rate=_percent(len(clicks), unique_views),
        active_jobs=sum(1 for j in jobs if _is_active(j, today)),
        expired_jobs=sum(1 for j in jobs if j.deadline is not None and j.deadline < today),
        pending_jobs=len(jobs) - len(submitted),
        approval_rate=_percent(len(approved), len(submitted)),
        average_days_to_first_click=_average_days_to_first_click(jobs, clicks),
    )


def platform_stats(
    jobs: Sequence[Job],
    views: Sequence[Event],
    clicks: Sequence[Event],
    saves: Sequence[Event],
) -> PlatformStats:
    """Reach and conversion across the whole board.

    Click and save rates are per unique (signed-in) viewer.
    """
    viewers = count_unique(views)
    clickers = count_unique(clicks)
    return PlatformStats(
        total_views=viewers.total,
        unique_viewers=viewers.unique,
        total_clicks=clickers.total,
        unique_users_clicking=clickers.unique,
        total_saves=len(saves),
        active_jobs=sum(1 for j in jobs if j.status == "active"),
        average_click_rate=_percent(clickers.unique, viewers.unique),
        average_save_rate=_percent(len(saves), viewers.unique),
    )


def job_type_distribution(jobs: Sequence[Job], clicks: Sequence[Event]) -> list[JobTypeShare]:
    """Postings and clicks per job type, in first-seen order."""
    clicks_per_job: dict[str, int] = defaultdict(int)
    for click in clicks:
        clicks_per_job[click.job_id] += 1

    tally: dict[str, list[int]] = {}
    for job in jobs:
        bucket = tally.setdefault(job.job_type.strip() or "Unknown", [0, 0])
        bucket[0] += 1
        bucket[1] += clicks_per_job.get(job.id, 0)

    return [
        JobTypeShare(
            job_type=job_type,
            count=count,
            percentage=_percent(count, len(jobs)),
            clicks=type_clicks,
        )
        for job_type, (count, type_clicks) in tally.items()
    ]


def skill_stats(
    jobs: Sequence[Job],
    views: Sequence[Event],
    clicks: Sequence[Event],
    top_n: int = 10,
) -> list[SkillStat]:
    """Per-skill reach and engagement, best engagement rate first."""
    counts = count_by_job([*views, *clicks])
    tally: dict[str, list[int]] = {}
    for job in jobs:
        job_counts = counts.get(job.id)
        job_views = job_counts.views if job_counts else 0
        job_clicks = job_counts.clicks if job_counts else 0
        for skill in job.skills:
            bucket = tally.setdefault(skill, [0, 0, 0])
            bucket[0] += 1
            bucket[1] += job_views
            bucket[2] += job_clicks

    stats = [
        SkillStat(
            skill=skill,
            job_count=count,
            average_views_per_job=_average(skill_views, count),
            engagement_rate=_percent(skill_clicks, skill_views),
        )
        for skill, (count, skill_views, skill_clicks) in tally.items()
    ]
    stats.sort(key=lambda s: s.engagement_rate, reverse=True)
    logger.debug("skill_stats: %d skills across %d jobs", len(stats), len(jobs))
    return stats[:top_n]
