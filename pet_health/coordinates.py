"""GPS coordinate stream sanitization."""

import math
from typing import Any, Iterable, List, Optional

from .models import Coordinate

# Shown when a day has no usable fix at all
FALLBACK_COORDINATE: Coordinate = (31.2304, 121.4737)


def _parse_component(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_point(point: Any) -> Optional[Coordinate]:
    """Parse one ``[lat, lng]`` pair; None when it is not a usable fix.

    Latitude exactly 0 is the trackers' "no fix" sentinel, not an equatorial
    reading.
    """
    try:
        lat_raw, lng_raw = point
    except (TypeError, ValueError):
        return None

    lat = _parse_component(lat_raw)
    lng = _parse_component(lng_raw)
    if lat is None or lng is None or lat == 0:
        return None
    return (lat, lng)


def valid_coordinates(points: Optional[Iterable[Any]]) -> List[Coordinate]:
    """Keep valid points in input order, duplicates included."""
    if points is None:
        return []
    valid = []
    for point in points:
        parsed = parse_point(point)
        if parsed is not None:
            valid.append(parsed)
    return valid


def sanitize(points: Optional[Iterable[Any]]) -> List[Coordinate]:
    """Valid points in input order, or the single fallback point when none survive."""
    return valid_coordinates(points) or [FALLBACK_COORDINATE]
