"""Manual correction of a report from an operator-supplied partial report."""

from typing import Any, Dict, Mapping, Type

from pydantic import BaseModel, ValidationError

from .coordinates import valid_coordinates
from .exceptions import OverrideValidationError
from .logging_utils import setup_logger
from .models import ActivityStats, DailyReport, DeviceStats, TrendStats, VitalStats

logger = setup_logger(__name__)

SECTION_MODELS: Dict[str, Type[BaseModel]] = {
    "activity": ActivityStats,
    "vitals": VitalStats,
    "trend": TrendStats,
    "device": DeviceStats,
}

SCALAR_FIELDS = ("report_date", "pet_id", "species_id", "summary", "advice")


def _field_names(model: Type[BaseModel]) -> Dict[str, str]:
    """Map both the alias and the attribute name of each field to the attribute name."""
    names = {}
    for name, info in model.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


def _normalize_keys(payload: Mapping[str, Any], model: Type[BaseModel], where: str) -> Dict[str, Any]:
    names = _field_names(model)
    normalized = {}
    for key, value in payload.items():
        if key not in names:
            raise OverrideValidationError(f"unknown field {where}{key!r}")
        if value is not None:
            normalized[names[key]] = value
    return normalized


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'value'}: {item['msg']}"
        for item in error.errors()
    )


def merge_override(report: DailyReport, override: Mapping[str, Any]) -> DailyReport:
    """Apply a partial report on top of ``report`` and return a new report.

    Sub-objects (activity, vitals, trend, device) merge shallowly: fields the
    override leaves out keep their current values. Scalars are replaced.
    ``coordinates`` is replaced wholesale, and only by a non-empty list.
    Keys may be camelCase or snake_case; None values count as absent.

    Args:
        report: Current report; never modified.
        override: Partial report.

    Returns:
        The merged report.

    Raises:
        OverrideValidationError: If the payload is malformed; nothing is applied.
    """
    if not isinstance(override, Mapping):
        raise OverrideValidationError(f"override must be an object, got {type(override).__name__}")

    top_level = _normalize_keys(override, DailyReport, "")
    merged: Dict[str, Any] = report.model_dump()

    for name, value in top_level.items():
        if name in SECTION_MODELS:
            if not isinstance(value, Mapping):
                raise OverrideValidationError(f"{name} must be an object, got {type(value).__name__}")
            section = _normalize_keys(value, SECTION_MODELS[name], f"{name}.")
            merged[name] = {**merged[name], **section}
        elif name == "coordinates":
            if not isinstance(value, (list, tuple)):
                raise OverrideValidationError("coordinates must be a list of [lat, lng] pairs")
            if not value:
                continue
            points = valid_coordinates(value)
            if not points:
                raise OverrideValidationError("coordinates contain no valid [lat, lng] point")
            merged[name] = points
        elif name in SCALAR_FIELDS:
            merged[name] = value

    try:
        result = DailyReport.model_validate(merged)
    except ValidationError as e:
        raise OverrideValidationError(f"override rejected: {_describe(e)}") from e

    logger.info(f"Merged override into report for tracker {report.pet_id}: {', '.join(sorted(top_level))}")
    return result
