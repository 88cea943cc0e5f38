"""Event parsing and response helpers shared by the Lambda handlers."""

import json
from typing import Any, Dict, Optional

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Accept, Authorization",
    "Content-Type": "application/json; charset=utf-8",
    "Cache-Control": "no-store, max-age=0",
}


def parse_event(event: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Flatten direct invocations and API Gateway events into one dict.

    API Gateway delivers the body as a JSON string and GET parameters under
    ``queryStringParameters``; both are merged over the raw event.

    Raises:
        ValueError: If the body is present but is not a JSON object.
    """
    event = dict(event or {})
    params = event.pop("queryStringParameters", None) or {}

    body = event.pop("body", None)
    if isinstance(body, str) and body.strip():
        try:
            body = json.loads(body)
        except json.JSONDecodeError as e:
            raise ValueError(f"Request body is not valid JSON: {e.msg}")
    if body is None or body == "":
        body = {}
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")

    return {**event, **params, **body}


def get_pet_id(payload: Dict[str, Any]) -> Optional[str]:
    pet_id = payload.get("petId") or payload.get("pet_id")
    return str(pet_id).strip() if pet_id is not None else None


def response(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": CORS_HEADERS,
        "body": json.dumps(payload, ensure_ascii=False, default=str),
    }


def error_response(status_code: int, error: str) -> Dict[str, Any]:
    return response(status_code, {"status": "error", "error": error})
