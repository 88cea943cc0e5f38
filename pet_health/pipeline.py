"""Raw series to DailyReport normalization."""

from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping, Optional, Sequence

import pandas as pd

from .aggregator import Window, aggregate, daily_step_deltas
from .assembler import assemble, build_activity, build_device, build_vitals
from .config import settings
from .coordinates import valid_coordinates
from .logging_utils import setup_logger
from .models import DailyReport, ReportIdentity
from .row_accessor import RawSeries
from .trends import trend_from_history

logger = setup_logger(__name__)


def local_today(now: datetime, tz: Optional[str] = None) -> date:
    """Calendar date of ``now`` in the report timezone."""
    stamp = pd.Timestamp(now)
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return stamp.tz_convert(tz or settings.REPORT_TIMEZONE).date()


def day_window(report_date: date, tz: Optional[str] = None) -> Window:
    """``[midnight, next midnight)`` of ``report_date`` in the report timezone."""
    start = pd.Timestamp(report_date).tz_localize(tz or settings.REPORT_TIMEZONE)
    return start, start + pd.Timedelta(days=1)


def normalize_series(
    series: RawSeries,
    pet_id: str,
    now: Optional[datetime] = None,
    report_date: Optional[date] = None,
) -> DailyReport:
    """Run one raw series through aggregation, classification and assembly.

    Args:
        series: Rows for one tracker, typically several days newest-first.
        pet_id: Tracker identity the rows belong to.
        now: Reference time for "today" and the offline check (defaults to now, UTC).
        report_date: Day to report (defaults to today in REPORT_TIMEZONE).

    Returns:
        A fully populated DailyReport.
    """
    now = now or datetime.now(timezone.utc)
    report_date = report_date or local_today(now)

    metrics = aggregate(series, window=day_window(report_date))
    if metrics.defaulted_fields:
        logger.info(f"Tracker {pet_id}: defaults used for {', '.join(metrics.defaulted_fields)}")

    trend = trend_from_history(daily_step_deltas(series), report_date)

    activity = build_activity(
        metrics.steps,
        stride=metrics.stride if metrics.stride is not None else settings.DEFAULT_STRIDE_M,
    )
    vitals = build_vitals(metrics.avg_temp, metrics.avg_pressure, metrics.avg_height)
    device = build_device(metrics.battery, metrics.rsrp, metrics.last_seen, now=now)

    return assemble(
        activity,
        vitals,
        device,
        trend,
        metrics.coordinates,
        ReportIdentity(pet_id=pet_id, report_date=report_date, species_id=metrics.species_id),
        now=now,
    )


def override_from_records(
    records: Sequence[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build a partial report (camelCase keys) from operator import rows.

    The rows go through the same alias lookup and aggregation as live data,
    with no time window. Identity fields are only included when a column for
    them exists, and coordinates only when at least one valid point was found,
    so an import never wipes a live trail.

    Args:
        records: Key/value rows, e.g. parsed spreadsheet lines.
        now: Reference time for the offline check.

    Returns:
        Override fragment for ``merge_override``; empty when ``records`` is empty.
    """
    if not records:
        return {}

    now = now or datetime.now(timezone.utc)
    metrics = aggregate(RawSeries.from_records(records))

    activity = build_activity(
        metrics.steps,
        stride=metrics.stride if metrics.stride is not None else settings.DEFAULT_STRIDE_M,
    )
    vitals = build_vitals(metrics.avg_temp, metrics.avg_pressure, metrics.avg_height)
    device = build_device(metrics.battery, metrics.rsrp, metrics.last_seen, now=now)

    override: Dict[str, Any] = {
        "activity": activity.model_dump(mode="json", by_alias=True),
        "vitals": vitals.model_dump(mode="json", by_alias=True),
        "device": device.model_dump(mode="json", by_alias=True),
    }
    if metrics.tracker_id:
        override["petId"] = metrics.tracker_id
    if metrics.species_id:
        override["speciesId"] = metrics.species_id

    coordinates = valid_coordinates(metrics.coordinates)
    if coordinates:
        override["coordinates"] = [list(point) for point in coordinates]

    return override
