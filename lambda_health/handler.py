"""Lambda handler for the liveness check."""

from datetime import datetime, timezone
from typing import Any, Dict

from pet_health.config import settings
from pet_health.lambda_utils import response


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    return response(200, {
        "status": "ok",
        "runtime": "aws-lambda",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "env_configured": bool(settings.INFLUX_URL),
    })
