"""Lambda handler serving today's report for one tracker."""

from typing import Any, Dict

from pet_health.config import settings
from pet_health.lambda_utils import error_response, get_pet_id, parse_event, response
from pet_health.logging_utils import setup_logger
from pet_health.models import SourceKind
from pet_health.orchestrator import build_daily_report
from pet_health.storage import archive_enabled, save_report

logger = setup_logger(__name__)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler for the telemetry endpoint.

    Expected event structure (direct invocation or API Gateway GET):
    {
        "petId": "221"  # Optional, defaults to the first tracker on the roster
    }

    The report is always returned with status 200; whether it is live or a
    demo substitute is carried in ``diagnostic``.

    Args:
        event: Lambda event dictionary.
        context: Lambda context object.

    Returns:
        Dictionary with statusCode and a JSON body ``{report, diagnostic}``.
    """
    try:
        payload = parse_event(event)
        roster = settings.pet_roster
        pet_id = get_pet_id(payload) or (roster[0] if roster else None)

        if not pet_id or pet_id not in roster:
            raise ValueError(f"Unknown petId {pet_id!r}. Must be one of: {', '.join(roster)}")

        result = build_daily_report(pet_id)

        if archive_enabled() and result.diagnostic.source_kind == SourceKind.LIVE:
            try:
                save_report(result.report, metadata={"pet_id": pet_id, "source": "live"})
            except Exception as e:
                # Archive failures never block the response
                logger.error(f"Failed to archive report for {pet_id}: {e}", exc_info=True)

        return response(200, result.to_json_dict())

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return error_response(400, str(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return error_response(500, str(e))
