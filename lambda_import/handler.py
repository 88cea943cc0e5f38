"""Lambda handler for manual data correction (operator import)."""

from datetime import date, datetime, timezone
from typing import Any, Dict

from pydantic import ValidationError

from pet_health.config import settings
from pet_health.lambda_utils import error_response, get_pet_id, parse_event, response
from pet_health.logging_utils import setup_logger
from pet_health.merge import merge_override
from pet_health.models import DailyReport
from pet_health.pipeline import local_today, override_from_records
from pet_health.storage import archive_enabled, load_report, save_report

logger = setup_logger(__name__)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler for the import endpoint.

    Expected event structure:
    {
        "petId": "221",
        "date": "2024-01-15",     # Optional, defaults to today
        "report": {...},          # Optional current report; loaded from S3 when absent
        "override": {...},        # Partial report, or
        "records": [{...}, ...]   # Key/value rows turned into a partial report
    }

    Args:
        event: Lambda event dictionary.
        context: Lambda context object.

    Returns:
        Dictionary with statusCode and the merged report as JSON body.
    """
    try:
        payload = parse_event(event)
        pet_id = get_pet_id(payload)
        if not pet_id or pet_id not in settings.pet_roster:
            raise ValueError(f"Unknown petId {pet_id!r}. Must be one of: {', '.join(settings.pet_roster)}")

        date_str = payload.get("date")
        if date_str:
            target_date = date.fromisoformat(str(date_str))
        else:
            # Same calendar day the telemetry handler archives under
            target_date = local_today(datetime.now(timezone.utc))

        override = payload.get("override")
        records = payload.get("records")
        if override is None and records:
            if not isinstance(records, list) or not all(isinstance(row, dict) for row in records):
                raise ValueError("records must be a list of objects")
            override = override_from_records(records)
        if not override:
            raise ValueError("Nothing to import: provide a non-empty override or records")

        override_pet_id = get_pet_id(override) if isinstance(override, dict) else None
        if override_pet_id and override_pet_id != pet_id:
            raise ValueError(f"Override petId {override_pet_id!r} does not match petId {pet_id!r}")

        if payload.get("report"):
            try:
                current = DailyReport.model_validate(payload["report"])
            except ValidationError as e:
                raise ValueError(f"Invalid report: {e.error_count()} validation error(s)") from e
            if current.pet_id != pet_id:
                raise ValueError(f"Report petId {current.pet_id!r} does not match petId {pet_id!r}")
        elif archive_enabled():
            current = load_report(pet_id, target_date)
        else:
            current = None

        if current is None:
            logger.warning(f"No report to correct for {pet_id} on {target_date}")
            return response(404, {
                "status": "not_found",
                "petId": pet_id,
                "date": str(target_date),
                "message": "No report found for the specified tracker and date",
            })

        # OverrideValidationError is a ValueError: rejected without touching the current report
        merged = merge_override(current, override)

        if archive_enabled():
            save_report(merged, metadata={"pet_id": pet_id, "source": "manual"})

        return response(200, {"status": "success", "report": merged.to_json_dict()})

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return error_response(400, str(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return error_response(500, str(e))
