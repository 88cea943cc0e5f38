"""Assembly of the canonical DailyReport from its parts."""

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional

from .aggregator import DEFAULT_BATTERY_V, DEFAULT_PRESSURE_HPA, DEFAULT_RSRP_DBM, DEFAULT_TEMP_C
from .classification import (
    classify_activity,
    classify_device,
    classify_vitals,
    completion_rate,
)
from .config import settings
from .coordinates import sanitize
from .models import (
    ActiveLevel,
    ActivityStats,
    DailyReport,
    DataStatus,
    DeviceStats,
    ReportIdentity,
    TrendLabel,
    TrendStats,
    VitalStats,
    VitalStatus,
)

DEFAULT_SPECIES_ID = 1


def _as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    # Naive timestamps from the store are UTC
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def build_activity(steps: int, goal: Optional[int] = None, stride: Optional[float] = None) -> ActivityStats:
    goal = settings.DAILY_STEP_GOAL if goal is None else goal
    steps = max(int(steps), 0)
    return ActivityStats(
        steps=steps,
        completion_rate=completion_rate(steps, goal),
        active_level=classify_activity(steps),
        stride=stride,
    )


def build_vitals(
    avg_temp: float,
    avg_pressure: Optional[int] = None,
    avg_height: Optional[float] = None,
) -> VitalStats:
    return VitalStats(
        avg_temp=avg_temp,
        avg_pressure=avg_pressure,
        avg_height=avg_height,
        status=classify_vitals(avg_temp),
    )


def build_device(
    battery: float,
    rsrp: int,
    last_seen: Optional[datetime],
    now: Optional[datetime] = None,
    offline_after_minutes: Optional[int] = None,
) -> DeviceStats:
    now = _as_utc(now) or datetime.now(timezone.utc)
    last_seen = _as_utc(last_seen)
    if offline_after_minutes is None:
        offline_after_minutes = settings.OFFLINE_AFTER_MINUTES
    status = classify_device(
        battery,
        rsrp,
        last_seen,
        now,
        timedelta(minutes=offline_after_minutes),
    )
    return DeviceStats(
        battery=battery,
        data_status=status,
        rsrp=rsrp,
        last_seen=last_seen or now,
    )


def describe_day(activity: ActivityStats, vitals: VitalStats, device: DeviceStats, trend: TrendStats) -> str:
    """One-line plain summary used until the AI narrative replaces it."""
    parts = []
    if activity.active_level == ActiveLevel.HIGH:
        parts.append("Very active today and close to the daily goal.")
    elif activity.active_level == ActiveLevel.NORMAL:
        parts.append("A normal amount of activity today.")
    else:
        parts.append("A quiet day with little activity.")

    if trend.trend_label == TrendLabel.DOWN:
        parts.append("Activity is down compared with yesterday.")
    elif trend.trend_label == TrendLabel.UP:
        parts.append("Activity is up compared with yesterday.")

    if vitals.status == VitalStatus.WARNING:
        parts.append(f"Body temperature of {vitals.avg_temp}°C is outside the normal range.")
    else:
        parts.append("Vital signs look stable.")

    if device.data_status == DataStatus.OFFLINE:
        parts.append("The tracker has not reported recently.")
    return " ".join(parts)


def suggest_advice(activity: ActivityStats, vitals: VitalStats, device: DeviceStats, trend: TrendStats) -> List[str]:
    advice = []
    if activity.active_level == ActiveLevel.LOW or trend.trend_label == TrendLabel.DOWN:
        advice.append("Add a 15-30 minute interactive play session")
        advice.append("Keep an eye on activity over the next 2-3 days")
    if activity.active_level == ActiveLevel.HIGH:
        advice.append("Offer extra water after a very active day")
        advice.append("Check paw pads for wear")
    if vitals.status == VitalStatus.WARNING:
        advice.append("Re-check body temperature and contact a vet if it stays abnormal")
    if device.data_status == DataStatus.DEGRADED:
        advice.append("Charge the tracker or move it into better signal coverage")
    elif device.data_status == DataStatus.OFFLINE:
        advice.append("Check that the tracker is powered on and attached")
    if not advice:
        advice.append("Keep up the current routine")
    return advice


def assemble(
    activity: Optional[ActivityStats],
    vitals: Optional[VitalStats],
    device: Optional[DeviceStats],
    trend: Optional[TrendStats],
    coordinates: Optional[Iterable[Any]],
    identity: ReportIdentity,
    summary: Optional[str] = None,
    advice: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> DailyReport:
    """Compose a DailyReport; any missing part is replaced by its default.

    The result is always structurally complete, so a partially failed fetch
    still renders.
    """
    now = now or datetime.now(timezone.utc)

    activity = activity or build_activity(0)
    vitals = vitals or build_vitals(DEFAULT_TEMP_C, DEFAULT_PRESSURE_HPA)
    device = device or build_device(DEFAULT_BATTERY_V, DEFAULT_RSRP_DBM, None, now=now)
    trend = trend or TrendStats()

    return DailyReport(
        report_date=identity.report_date,
        pet_id=identity.pet_id,
        species_id=identity.species_id or DEFAULT_SPECIES_ID,
        summary=summary or describe_day(activity, vitals, device, trend),
        advice=advice or suggest_advice(activity, vitals, device, trend),
        activity=activity,
        vitals=vitals,
        trend=trend,
        device=device,
        coordinates=sanitize(coordinates),
    )
