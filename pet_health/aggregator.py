"""Aggregation of raw tracker rows into report scalars."""

from datetime import datetime
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .config import settings
from .models import Coordinate, RawMetrics
from .row_accessor import FIELD_ALIASES, RawSeries, cell, resolve_column

DEFAULT_TEMP_C = 38.5
DEFAULT_PRESSURE_HPA = 1013
DEFAULT_BATTERY_V = 3.7
DEFAULT_RSRP_DBM = -70

NUMERIC_FIELDS = ["step", "temp", "press", "height", "lat", "lng", "battery", "rsrp", "species", "stride"]

Window = Tuple[pd.Timestamp, pd.Timestamp]


def series_to_frame(series: RawSeries, fuzzy: Optional[bool] = None) -> pd.DataFrame:
    """Project a raw series onto canonical columns.

    Every canonical field becomes a column; fields the series lacks are all
    NaN. Numeric fields are coerced (unparsable and infinite values become
    NaN), ``time`` is parsed as UTC, and row order is preserved.

    Args:
        series: Raw columnar rows.
        fuzzy: Alias matching mode (defaults to settings.FUZZY_COLUMN_MATCH).

    Returns:
        DataFrame with one row per raw row.
    """
    if fuzzy is None:
        fuzzy = settings.FUZZY_COLUMN_MATCH

    data = {}
    for field_name, aliases in FIELD_ALIASES.items():
        index = resolve_column(series.columns, aliases, fuzzy)
        data[field_name] = [cell(row, index) for row in series.values]

    frame = pd.DataFrame(data, index=range(len(series.values)))

    for field_name in NUMERIC_FIELDS:
        frame[field_name] = pd.to_numeric(frame[field_name], errors="coerce")
    frame[NUMERIC_FIELDS] = frame[NUMERIC_FIELDS].astype(float).replace([np.inf, -np.inf], np.nan)

    frame["time"] = pd.to_datetime(frame["time"], utc=True, errors="coerce", format="ISO8601")
    return frame


def _step_delta(steps: pd.Series) -> int:
    """max - min of the counter, clamped at zero.

    A counter reset inside the window is not detected; the clamp only keeps
    the result non-negative.
    """
    readings = steps.dropna()
    if readings.empty:
        return 0
    return max(int(round(readings.max() - readings.min())), 0)


def _mean(values: pd.Series) -> Optional[float]:
    present = values.dropna()
    if present.empty:
        return None
    return float(present.mean())


def _latest(values: pd.Series) -> Optional[float]:
    """First non-missing value of an already newest-first column."""
    present = values.dropna()
    if present.empty:
        return None
    return float(present.iloc[0])


def _coordinates(frame: pd.DataFrame) -> List[Coordinate]:
    return list(zip(frame["lat"].tolist(), frame["lng"].tolist()))


def select_window(frame: pd.DataFrame, window: Optional[Window]) -> pd.DataFrame:
    """Rows inside ``[start, end)``; the window is ignored when no row has a time."""
    if window is None or not frame["time"].notna().any():
        return frame
    start, end = window
    return frame[(frame["time"] >= start) & (frame["time"] < end)]


def aggregate(series: RawSeries, window: Optional[Window] = None, fuzzy: Optional[bool] = None) -> RawMetrics:
    """Aggregate one series into report scalars.

    Steps, temperature, pressure, height and coordinates come from rows inside
    ``window``. Battery, signal, species, stride and last-seen are last-known
    values across the whole series, since a device that has been quiet today
    still has a last reading.

    Args:
        series: Raw columnar rows.
        window: Optional ``(start, end)`` tz-aware bounds.
        fuzzy: Alias matching mode (defaults to settings.FUZZY_COLUMN_MATCH).

    Returns:
        RawMetrics with documented defaults filled in for missing fields.
    """
    frame = series_to_frame(series, fuzzy=fuzzy)
    windowed = select_window(frame, window)
    newest_first = frame.sort_values("time", ascending=False, na_position="last", kind="stable")

    defaulted = []

    avg_temp = _mean(windowed["temp"])
    if avg_temp is None:
        avg_temp = DEFAULT_TEMP_C
        defaulted.append("temp")

    avg_pressure = _mean(windowed["press"])
    if avg_pressure is None:
        avg_pressure = DEFAULT_PRESSURE_HPA
        defaulted.append("press")

    avg_height = _mean(windowed["height"])

    battery = _latest(newest_first["battery"])
    if battery is None:
        battery = DEFAULT_BATTERY_V
        defaulted.append("battery")

    rsrp = _latest(newest_first["rsrp"])
    if rsrp is None:
        rsrp = DEFAULT_RSRP_DBM
        defaulted.append("rsrp")

    species = _latest(newest_first["species"])
    stride = _latest(newest_first["stride"])

    last_seen: Optional[datetime] = None
    times = frame["time"].dropna()
    if not times.empty:
        last_seen = times.max().to_pydatetime()

    tracker_ids = newest_first["tracker"].dropna()
    tracker_id = str(tracker_ids.iloc[0]).strip() if not tracker_ids.empty else None

    return RawMetrics(
        steps=_step_delta(windowed["step"]),
        avg_temp=round(avg_temp, 2),
        avg_pressure=int(round(avg_pressure)),
        avg_height=float(round(avg_height)) if avg_height is not None else None,
        battery=round(battery, 2),
        rsrp=int(round(rsrp)),
        last_seen=last_seen,
        species_id=int(species) if species is not None else None,
        stride=round(stride, 2) if stride is not None else None,
        tracker_id=tracker_id or None,
        coordinates=_coordinates(windowed),
        sample_count=len(windowed),
        defaulted_fields=defaulted,
    )


def daily_step_deltas(series: RawSeries, tz: Optional[str] = None, fuzzy: Optional[bool] = None) -> pd.Series:
    """Step delta per local calendar day.

    Args:
        series: Raw columnar rows spanning several days.
        tz: Timezone that defines the day boundary (defaults to settings.REPORT_TIMEZONE).
        fuzzy: Alias matching mode.

    Returns:
        Series of clamped step deltas indexed by ``datetime.date``; empty when
        no row carries both a time and a step reading.
    """
    tz = tz or settings.REPORT_TIMEZONE
    frame = series_to_frame(series, fuzzy=fuzzy)[["time", "step"]].dropna()
    if frame.empty:
        return pd.Series(dtype=float)

    days = frame["time"].dt.tz_convert(tz).dt.date
    grouped = frame.groupby(days)["step"]
    return (grouped.max() - grouped.min()).clip(lower=0)
