"""InfluxDB 1.x compatible HTTP client for tracker telemetry."""

import json
import re
from typing import Any, Dict, List, Optional

import requests

from .config import settings
from .exceptions import StoreConfigError, StoreResponseError, StoreTransportError
from .logging_utils import setup_logger
from .row_accessor import RawSeries

logger = setup_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class InfluxClient:
    """Client for the ``/query`` endpoint of an InfluxDB 1.x compatible store."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        database: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        roster: Optional[List[str]] = None,
    ):
        """Initialize the store client.

        Args:
            base_url: Store base URL (defaults to settings.INFLUX_URL); the
                client appends ``/query``.
            database: Database name (defaults to settings.INFLUX_BUCKET).
            token: API token (defaults to settings.INFLUX_TOKEN); optional.
            timeout: Request timeout in seconds (defaults to settings.INFLUX_TIMEOUT_SECONDS).
            roster: Tracker ids allowed in queries (defaults to settings.pet_roster).

        Raises:
            StoreConfigError: If no base URL is configured.
        """
        self.base_url = (base_url or settings.INFLUX_URL).strip().rstrip("/")
        self.database = (database or settings.INFLUX_BUCKET).strip()
        self.token = (token if token is not None else settings.INFLUX_TOKEN).strip()
        self.timeout = timeout or settings.INFLUX_TIMEOUT_SECONDS
        self.roster = roster if roster is not None else settings.pet_roster

        if not self.base_url:
            raise StoreConfigError("INFLUX_URL is not set")

        self.headers = {
            "Accept": "application/json",
            "User-Agent": "PetHealthAPI/1.4",
        }
        if self.token:
            self.headers["Authorization"] = f"Token {self.token}"

    def build_query(
        self,
        measurement: Optional[str] = None,
        lookback_days: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> str:
        """InfluxQL for one tracker's recent rows, newest first.

        The tracker id is a bound parameter (``$tracker_id``); only
        configuration values are written into the statement text.
        """
        measurement = measurement or settings.INFLUX_MEASUREMENT
        lookback_days = int(lookback_days or settings.INFLUX_LOOKBACK_DAYS)
        limit = int(limit or settings.INFLUX_ROW_LIMIT)

        if not _IDENTIFIER.match(measurement):
            raise StoreConfigError(f"INFLUX_MEASUREMENT {measurement!r} is not a plain identifier")

        return (
            f'SELECT * FROM "{measurement}" '
            f'WHERE "tracker_id" = $tracker_id AND time > now() - {lookback_days}d '
            f"ORDER BY time DESC LIMIT {limit}"
        )

    def query_series(self, pet_id: str) -> Optional[RawSeries]:
        """Fetch the recent rows of one tracker.

        Args:
            pet_id: Tracker id; must be on the roster.

        Returns:
            The first series of the result, or None when the query produced
            no series. A returned series may have zero rows.

        Raises:
            StoreConfigError: If the tracker id is not on the roster.
            StoreTransportError: On timeout, connection failure or non-2xx status.
            StoreResponseError: If the body is HTML, invalid JSON, or not a query result.
        """
        if pet_id not in self.roster:
            raise StoreConfigError(f"tracker {pet_id} is not in TRACKED_PET_IDS")

        params = {
            "db": self.database,
            "q": self.build_query(),
            "params": json.dumps({"tracker_id": pet_id}),
        }

        logger.info(f"Querying store for tracker {pet_id} (db={self.database})")

        try:
            response = requests.get(
                f"{self.base_url}/query",
                headers=self.headers,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise StoreTransportError(f"store query timed out after {self.timeout:g}s") from e
        except requests.exceptions.RequestException as e:
            raise StoreTransportError(f"store unreachable: {e}") from e

        if not response.ok:
            raise StoreTransportError(
                f"store returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return self._parse_body(response)

    @staticmethod
    def _parse_body(response: requests.Response) -> Optional[RawSeries]:
        content_type = response.headers.get("Content-Type", "")
        body = response.text or ""

        if "text/html" in content_type or body.lstrip().startswith("<"):
            raise StoreResponseError(
                f"store endpoint returned HTML ({content_type or 'no content type'}) instead of JSON",
                routing=True,
            )

        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise StoreResponseError(f"response body is not valid JSON: {e.msg}") from e

        if isinstance(data, dict) and data.get("error"):
            raise StoreResponseError(f"store rejected query: {data['error']}")
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise StoreResponseError("response lacks a 'results' list")

        results = data["results"]
        if not results:
            return None

        first: Dict[str, Any] = results[0]
        if not isinstance(first, dict):
            raise StoreResponseError("result entry is not an object")
        if first.get("error"):
            raise StoreResponseError(f"store rejected query: {first['error']}")

        series_list = first.get("series") or []
        if not series_list:
            return None

        series = series_list[0]
        if not isinstance(series, dict) or not isinstance(series.get("columns"), list):
            raise StoreResponseError("series lacks a 'columns' list")

        values = series.get("values") or []
        if not isinstance(values, list):
            raise StoreResponseError("series 'values' is not a list")

        return RawSeries(
            columns=[str(column) for column in series["columns"]],
            values=[row if isinstance(row, list) else [] for row in values],
            name=series.get("name"),
        )
