"""Day-over-day and rolling-average step trends."""

import math
from datetime import date, timedelta
from typing import Optional

import pandas as pd

from .classification import classify_trend
from .models import TrendStats

ROLLING_WINDOW_DAYS = 7


def relative_change(today: Optional[float], baseline: Optional[float]) -> float:
    """``(today - baseline) / baseline``, or 0 when either side is unusable.

    A baseline of zero, below zero, None, NaN or infinity never reaches the
    division, so the result is always finite.
    """
    if today is None or baseline is None:
        return 0.0
    if not (math.isfinite(today) and math.isfinite(baseline)) or baseline <= 0:
        return 0.0
    return (today - baseline) / baseline


def calculate_trend(
    today: Optional[float],
    yesterday: Optional[float],
    rolling_average: Optional[float],
) -> TrendStats:
    vs_yesterday = relative_change(today, yesterday)
    vs_rolling = relative_change(today, rolling_average)
    return TrendStats(
        vs_yesterday=round(vs_yesterday, 2),
        vs_7_day_avg=round(vs_rolling, 2),
        trend_label=classify_trend(vs_yesterday),
    )


def trend_from_history(daily_steps: pd.Series, report_date: date) -> TrendStats:
    """Trend of ``report_date`` against the day before and the prior 7-day mean.

    Args:
        daily_steps: Step delta per calendar day, indexed by ``date``.
        report_date: Day being reported.

    Returns:
        TrendStats; ratios are 0 and the label STABLE when history is absent.
    """
    if daily_steps is None or daily_steps.empty:
        return calculate_trend(None, None, None)

    today = daily_steps.get(report_date)
    yesterday = daily_steps.get(report_date - timedelta(days=1))

    window = [report_date - timedelta(days=offset) for offset in range(1, ROLLING_WINDOW_DAYS + 1)]
    prior = daily_steps[daily_steps.index.isin(window)].dropna()
    rolling_average = float(prior.mean()) if not prior.empty else None

    return calculate_trend(
        float(today) if today is not None and not pd.isna(today) else None,
        float(yesterday) if yesterday is not None and not pd.isna(yesterday) else None,
        rolling_average,
    )
