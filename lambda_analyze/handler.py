"""Lambda handler for generating the AI daily summary."""

from typing import Any, Dict

from pydantic import ValidationError

from pet_health.lambda_utils import error_response, parse_event, response
from pet_health.logging_utils import setup_logger
from pet_health.models import DailyReport
from pet_health.summarizer import generate_summary

logger = setup_logger(__name__)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Lambda handler for the analyze endpoint.

    Expected event structure:
    {
        "report": {...},        # DailyReport JSON
        "provider": "gemini"    # Optional: gemini | deepseek | qwen
    }

    Args:
        event: Lambda event dictionary.
        context: Lambda context object.

    Returns:
        Dictionary with statusCode and a JSON body ``{text, llm_status}``.
    """
    try:
        payload = parse_event(event)
        raw_report = payload.get("report")
        if not raw_report:
            raise ValueError("Missing report data")

        try:
            report = DailyReport.model_validate(raw_report)
        except ValidationError as e:
            raise ValueError(f"Invalid report: {e.error_count()} validation error(s)") from e

        provider = payload.get("provider") or "gemini"
        text, metadata = generate_summary(report, provider)
        llm_status = "fallback" if metadata.get("error") else "ok"

        body = {
            "text": text,
            "llm_status": llm_status,
            "provider": metadata.get("provider"),
            "model": metadata.get("model"),
        }
        if metadata.get("error"):
            body["error"] = metadata["error"]

        return response(200, body)

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return error_response(400, str(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return error_response(500, str(e))
