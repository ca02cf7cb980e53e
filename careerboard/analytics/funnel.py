"""Conversion funnel and guarded percentage helpers."""

import logging

from careerboard.core.schemas import Funnel

logger = logging.getLogger(__name__)


def safe_rate(numerator: float, denominator: float) -> float:
    """Return ``numerator / max(denominator, 1) * 100``."""
    return numerator / max(denominator, 1) * 100


def compute_funnel(view_count: int, click_count: int, completion_count: int) -> Funnel:
    """Compute view -> click -> completion conversion percentages.

    Later stages are not guaranteed to be subsets of earlier ones (a click
    can arrive from a session whose view was never recorded), so rates above
    100 are kept as-is.
    """
    funnel = Funnel(
        view_to_click=safe_rate(click_count, view_count),
        click_to_completion=safe_rate(completion_count, click_count),
        overall=safe_rate(completion_count, view_count),
    )
    if funnel.view_to_click > 100 or funnel.click_to_completion > 100:
        logger.debug(
            "Funnel stage exceeds 100%% (views=%d clicks=%d completions=%d)",
            view_count, click_count, completion_count,
        )
    return funnel


def growth_percentage(current: int, previous: int) -> float:
    """Period-over-period growth in percent.

    With no previous activity any current activity counts as 100% growth.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100
