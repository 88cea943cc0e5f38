"""Single entry point that turns a tracker id into a report, whatever the store does.

Every terminal state yields a structurally valid DailyReport plus a
FetchDiagnostic; nothing raised by the store or the normalization reaches the
caller.
"""

from datetime import datetime, timezone
from typing import Optional

from .demo import generate_demo_report
from .exceptions import StoreConfigError, StoreResponseError, StoreTransportError
from .influx_client import InfluxClient
from .logging_utils import setup_logger
from .models import FetchDiagnostic, FetchState, ReportResult, SourceKind
from .pipeline import normalize_series

logger = setup_logger(__name__)


def _fallback(pet_id: str, state: FetchState, reason: str, now: datetime) -> ReportResult:
    logger.warning(f"Demo report for tracker {pet_id} ({state.value}): {reason}")
    return ReportResult(
        report=generate_demo_report(pet_id, now=now),
        diagnostic=FetchDiagnostic(
            using_fallback=True,
            reason=reason,
            source_kind=SourceKind.DEMO,
            state=state,
        ),
    )


def build_daily_report(
    pet_id: str,
    client: Optional[InfluxClient] = None,
    now: Optional[datetime] = None,
) -> ReportResult:
    """Fetch and normalize today's report for one tracker.

    Args:
        pet_id: Tracker id.
        client: Store client (built from settings when omitted).
        now: Reference time (defaults to now, UTC).

    Returns:
        ReportResult whose diagnostic says whether the report is LIVE or a
        DEMO substitute, and why.
    """
    now = now or datetime.now(timezone.utc)
    logger.info(f"Building report for tracker {pet_id}")

    try:
        if client is None:
            client = InfluxClient()
        series = client.query_series(pet_id)
    except StoreConfigError as e:
        return _fallback(pet_id, FetchState.CONFIG_MISSING, f"configuration error: {e}", now)
    except StoreTransportError as e:
        return _fallback(pet_id, FetchState.STORE_ERROR, f"transport error: {e}", now)
    except StoreResponseError as e:
        kind = "routing error" if e.routing else "data error"
        return _fallback(pet_id, FetchState.MALFORMED_RESPONSE, f"{kind}: {e}", now)
    except Exception as e:
        logger.error(f"Unexpected error querying tracker {pet_id}: {e}", exc_info=True)
        return _fallback(pet_id, FetchState.STORE_ERROR, f"unexpected error: {e}", now)

    if series is None:
        return _fallback(
            pet_id, FetchState.EMPTY, f"no data for identity {pet_id}: query produced no series", now
        )
    if series.is_empty:
        return _fallback(
            pet_id, FetchState.EMPTY, f"no data for identity {pet_id}: series present but empty", now
        )

    try:
        report = normalize_series(series, pet_id, now=now)
    except Exception as e:
        logger.error(f"Could not normalize rows for tracker {pet_id}: {e}", exc_info=True)
        return _fallback(
            pet_id, FetchState.MALFORMED_RESPONSE, f"data error: could not normalize rows: {e}", now
        )

    logger.info(f"Live report for tracker {pet_id}: {len(series.values)} rows, {report.activity.steps} steps")
    return ReportResult(
        report=report,
        diagnostic=FetchDiagnostic(
            using_fallback=False,
            reason=f"live data: {len(series.values)} rows",
            source_kind=SourceKind.LIVE,
            state=FetchState.SUCCESS,
        ),
    )
