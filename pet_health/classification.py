"""Threshold classification of aggregated metrics.

Thresholds are global clinical/device constants; they do not vary by species
or by pet.
"""

import math
from datetime import datetime, timedelta
from typing import Optional

from .models import ActiveLevel, DataStatus, TrendLabel, VitalStatus

HIGH_ACTIVITY_STEPS = 8000
NORMAL_ACTIVITY_STEPS = 4000

TEMP_HIGH_C = 39.2
TEMP_LOW_C = 37.5

LOW_BATTERY_V = 3.65
WEAK_SIGNAL_DBM = -105

TREND_UP_RATIO = 0.1
TREND_DOWN_RATIO = -0.1


def classify_activity(steps: int) -> ActiveLevel:
    if steps > HIGH_ACTIVITY_STEPS:
        return ActiveLevel.HIGH
    if steps > NORMAL_ACTIVITY_STEPS:
        return ActiveLevel.NORMAL
    return ActiveLevel.LOW


def completion_rate(steps: int, goal: int) -> float:
    """Share of the daily goal reached, clamped to [0, 1] and rounded to 2 dp."""
    if goal <= 0:
        return 0.0
    return round(min(max(steps / goal, 0.0), 1.0), 2)


def classify_vitals(avg_temp: float) -> VitalStatus:
    if avg_temp > TEMP_HIGH_C or avg_temp < TEMP_LOW_C:
        return VitalStatus.WARNING
    return VitalStatus.NORMAL


def classify_device(
    battery: float,
    rsrp: int,
    last_seen: Optional[datetime],
    now: datetime,
    offline_after: timedelta,
) -> DataStatus:
    """Device health; OFFLINE wins over DEGRADED.

    An unknown ``last_seen`` cannot prove the device is offline, so only the
    battery and signal checks apply.
    """
    if last_seen is not None and now - last_seen > offline_after:
        return DataStatus.OFFLINE
    if battery < LOW_BATTERY_V or rsrp < WEAK_SIGNAL_DBM:
        return DataStatus.DEGRADED
    return DataStatus.NORMAL


def classify_trend(vs_yesterday: float) -> TrendLabel:
    if not math.isfinite(vs_yesterday):
        return TrendLabel.STABLE
    if vs_yesterday > TREND_UP_RATIO:
        return TrendLabel.UP
    if vs_yesterday < TREND_DOWN_RATIO:
        return TrendLabel.DOWN
    return TrendLabel.STABLE
