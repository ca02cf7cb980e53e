"""Composite engagement scoring and ranking for jobs.

Score formula (weights from ScoringConfig, defaults in parentheses):

    score = unique_clicks * click_weight (3.0)
          + saves * save_weight (2.0)
          + unique_views * view_weight (0.1)
          + click_through_rate * rate_weight (2.0)
          + daily_rate * daily_weight (5.0)

    click_through_rate = unique_clicks / unique_views * 100  (0 when unique_views == 0)
    daily_rate = (unique_views + unique_clicks + saves) / days_active

Scores are unbounded above; only their relative order is meaningful.
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime
from typing import Literal

from careerboard.analytics.aggregator import days_active
from careerboard.core.config import RankMetric, ScoringConfig, TierConfig
from careerboard.core.schemas import (
    EngagementInput,
    EngagementTierCount,
    Job,
    JobCounts,
    JobStatus,
    LeaderboardEntry,
    ScoredJob,
)

logger = logging.getLogger(__name__)

Tier = Literal["high", "medium", "low", "none"]
TIERS: tuple[Tier, ...] = ("high", "medium", "low", "none")

_EMPTY_COUNTS = JobCounts()


def click_through_rate(unique_clicks: int, unique_views: int) -> float:
    """Unique clicks per unique view in percent; 0.0 when nothing was viewed."""
    if unique_views == 0:
        return 0.0
    return unique_clicks / unique_views * 100


def _daily_rate(counts: EngagementInput) -> float:
    return (counts.unique_views + counts.unique_clicks + counts.saves) / counts.days_active


def compute_engagement_score(
    counts: EngagementInput,
    weights: ScoringConfig | None = None,
) -> float:
    """Return the composite engagement score for one job.

    Total over valid input: zero views give a click-through rate of 0, and
    ``days_active`` is validated to be at least 1.
    """
    w = weights or ScoringConfig()
    rate = click_through_rate(counts.unique_clicks, counts.unique_views)
    return (
        counts.unique_clicks * w.click_weight
        + counts.saves * w.save_weight
        + counts.unique_views * w.view_weight
        + rate * w.rate_weight
        + _daily_rate(counts) * w.daily_weight
    )


def score_job(
    job: Job,
    counts: JobCounts,
    now: datetime,
    weights: ScoringConfig | None = None,
) -> ScoredJob:
    """Score a single job from its aggregated counts."""
    engagement = EngagementInput(
        unique_views=counts.unique_views,
        unique_clicks=counts.unique_clicks,
        saves=counts.saves,
        days_active=days_active(job.created_at, now),
    )
    return ScoredJob(
        job=job,
        counts=counts,
        days_active=engagement.days_active,
        click_through_rate=click_through_rate(counts.unique_clicks, counts.unique_views),
        daily_rate=_daily_rate(engagement),
        score=compute_engagement_score(engagement, weights),
    )


def score_jobs(
    jobs: Iterable[Job],
    counts_by_job: Mapping[str, JobCounts],
    now: datetime,
    weights: ScoringConfig | None = None,
    status: JobStatus | None = "active",
) -> list[ScoredJob]:
    """Score every job (optionally only those with ``status``), in input order.

    Jobs missing from ``counts_by_job`` are scored with zero counts.
    """
    scored = [
        score_job(job, counts_by_job.get(job.id, _EMPTY_COUNTS), now, weights)
        for job in jobs
        if status is None or job.status == status
    ]
    logger.debug("Scored %d jobs", len(scored))
    return scored


_METRIC_KEYS: dict[str, Callable[[ScoredJob], float]] = {
    "score": lambda s: s.score,
    "clicks": lambda s: s.counts.unique_clicks,
    "saves": lambda s: s.counts.saves,
}


def rank(items: Sequence[ScoredJob], metric: RankMetric = "score") -> list[ScoredJob]:
    """Sort scored jobs by ``metric`` descending.

    The sort is stable: equal values keep their input order.

    Raises:
        ValueError: If ``metric`` is not one of score, clicks, saves.
    """
    key = _METRIC_KEYS.get(metric)
    if key is None:
        valid = ", ".join(sorted(_METRIC_KEYS))
        msg = f"Unknown rank metric '{metric}'. Available: {valid}"
        raise ValueError(msg)
    return sorted(items, key=key, reverse=True)


def leaderboard(
    scored: Sequence[ScoredJob],
    metric: RankMetric = "score",
    top_n: int | None = None,
) -> list[LeaderboardEntry]:
    """Rank scored jobs and return the top ``top_n`` as 1-based entries.

    Raises:
        ValueError: If ``top_n`` is given and less than 1.
    """
    if top_n is not None and top_n < 1:
        msg = f"top_n must be at least 1, got {top_n}"
        raise ValueError(msg)
    ranked = rank(scored, metric)
    if top_n is not None:
        ranked = ranked[:top_n]
    return [
        LeaderboardEntry(
            job_id=s.job.id,
            title=s.job.title,
            company=s.job.company,
            score=s.score,
            rank=position,
            unique_views=s.counts.unique_views,
            unique_clicks=s.counts.unique_clicks,
            saves=s.counts.saves,
        )
        for position, s in enumerate(ranked, start=1)
    ]


def classify_engagement(counts: JobCounts, thresholds: TierConfig | None = None) -> Tier:
    """Place a job in an engagement tier by clicks per unique view.

    Jobs without clicks are "none". Clicks with no unique views count as
    "low" since no rate can be measured.
    """
    t = thresholds or TierConfig()
    if counts.clicks == 0:
        return "none"
    if counts.unique_views == 0:
        return "low"
    rate = counts.clicks / counts.unique_views * 100
    if rate > t.high_threshold:
        return "high"
    if rate >= t.medium_threshold:
        return "medium"
    return "low"


def engagement_tiers(
    jobs: Sequence[Job],
    counts_by_job: Mapping[str, JobCounts],
    thresholds: TierConfig | None = None,
) -> list[EngagementTierCount]:
    """Count jobs per engagement tier, with each tier's share of all jobs."""
    tally: dict[Tier, int] = dict.fromkeys(TIERS, 0)
    for job in jobs:
        tally[classify_engagement(counts_by_job.get(job.id, _EMPTY_COUNTS), thresholds)] += 1
    total = len(jobs)
    return [
        EngagementTierCount(
            tier=tier,
            count=count,
            percentage=round(count / total * 100, 1) if total else 0.0,
        )
        for tier, count in tally.items()
    ]
