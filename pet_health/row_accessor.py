"""Field lookup over columnar time-series rows.

Column names drift between tracker firmware versions (``step``, ``STEP``,
``步数``), so fields are resolved through alias lists instead of fixed
positions. The alias table is plain data and can be extended without touching
the lookup logic.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

# Canonical field -> aliases. The first alias is the column name the current
# firmware writes and is tried as an exact match before any fuzzy matching.
FIELD_ALIASES: Dict[str, Sequence[str]] = {
    "time": ("time", "TIME", "时间", "日期"),
    "tracker": ("tracker_id", "TRACKERID", "TID", "设备"),
    "step": ("step", "STEP", "计步", "步数"),
    "temp": ("temp", "TEMP", "体温", "温度"),
    "press": ("press", "PRESS", "气压"),
    "height": ("height", "HEIGHT", "高度", "海拔"),
    "lat": ("lat", "LATITUDE", "LAT", "纬度"),
    "lng": ("lng", "LONGITUDE", "LNG", "LON", "经度"),
    "battery": ("batvol", "BATTVOL", "BATVOL", "BATTERY", "电量", "电压"),
    "rsrp": ("rsrp", "RSRP", "信号"),
    "species": ("species_id", "SPECIES", "物种", "品种"),
    "stride": ("stride", "STRIDE", "步幅"),
}


@dataclass
class RawSeries:
    """One columnar result batch: column names plus rows aligned to them."""

    columns: List[str] = field(default_factory=list)
    values: List[List[Any]] = field(default_factory=list)
    name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return len(self.values) == 0

    @classmethod
    def from_records(cls, records: Sequence[Mapping[str, Any]]) -> "RawSeries":
        """Build a series from key/value rows, e.g. operator import sheets.

        Columns are the union of keys in first-seen order; keys missing from a
        record become ``None`` in that row.
        """
        columns: List[str] = []
        for record in records:
            for key in record.keys():
                key = str(key)
                if key not in columns:
                    columns.append(key)

        values = []
        for record in records:
            by_name = {str(key): value for key, value in record.items()}
            values.append([by_name.get(column) for column in columns])

        return cls(columns=columns, values=values)


def resolve_column(
    columns: Sequence[str],
    candidate_keys: Sequence[str],
    fuzzy: bool = True,
) -> Optional[int]:
    """Return the index of the column holding a field, or None.

    Args:
        columns: Column names of the series.
        candidate_keys: Aliases for the field; ``candidate_keys[0]`` is tried
            as an exact, case-sensitive match first.
        fuzzy: When set, fall back to case-insensitive substring matching of
            every alias; the first column (in ``columns`` order) that contains
            any alias wins.

    Returns:
        Column index, or None when nothing matches.
    """
    if not candidate_keys:
        return None

    names = [str(column) for column in columns]
    primary = candidate_keys[0]
    if primary in names:
        return names.index(primary)

    if not fuzzy:
        return None

    aliases = [alias.upper() for alias in candidate_keys if alias]
    for index, name in enumerate(names):
        upper_name = name.upper()
        if any(alias in upper_name for alias in aliases):
            return index
    return None


def cell(row: Sequence[Any], index: Optional[int]) -> Any:
    """Value at ``index``, or None when the column is absent or the row is short."""
    if index is None or index < 0:
        return None
    try:
        return row[index]
    except (IndexError, TypeError, KeyError):
        return None


def get_field(
    row: Sequence[Any],
    columns: Sequence[str],
    candidate_keys: Sequence[str],
    fuzzy: bool = True,
) -> Any:
    """Resolve a named field in one row; absence yields None, never an error."""
    return cell(row, resolve_column(columns, candidate_keys, fuzzy))
