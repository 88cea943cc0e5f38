"""Shared fixtures: a fixed clock and a multi-day tracker series."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

from pet_health.config import settings
from pet_health.row_accessor import RawSeries

COLUMNS = [
    "time", "batvol", "height", "lat", "lng", "press",
    "rsrp", "species_id", "step", "temp", "tracker_id",
]

# Newest first, as the store returns them. Daily step deltas:
# 2024-06-15 -> 5000, 2024-06-14 -> 5000, 2024-06-13 -> 6000
ROWS = [
    ["2024-06-15T11:55:00Z", 3.81, 12, 31.2310, 121.4740, 1012, -75, 1, 6500, 38.6, "221"],
    ["2024-06-15T10:00:00Z", 3.82, 14, 0, 0, 1014, -74, 1, 4200, 38.4, "221"],
    ["2024-06-15T08:00:00Z", 3.83, None, 31.2300, 121.4730, None, -73, 1, 1500, None, "221"],
    ["2024-06-14T20:00:00Z", 3.85, 10, 31.2200, 121.4600, 1010, -70, 1, 9000, 38.9, "221"],
    ["2024-06-14T06:00:00Z", 3.86, 10, 31.2210, 121.4610, 1011, -70, 1, 4000, 38.7, "221"],
    ["2024-06-13T20:00:00Z", 3.90, 11, 31.2100, 121.4500, 1009, -69, 1, 7000, 38.8, "221"],
    ["2024-06-13T06:00:00Z", 3.91, 11, 31.2110, 121.4510, 1008, -69, 1, 1000, 38.6, "221"],
]


@pytest.fixture
def now() -> datetime:
    """Fixed reference time, five minutes after the newest row."""
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def tracker_series() -> RawSeries:
    return RawSeries(columns=list(COLUMNS), values=[list(row) for row in ROWS], name="pet_activity")


@pytest.fixture
def influx_payload() -> Dict[str, Any]:
    return {
        "results": [
            {
                "statement_id": 0,
                "series": [{"name": "pet_activity", "columns": list(COLUMNS), "values": [list(r) for r in ROWS]}],
            }
        ]
    }


@pytest.fixture(autouse=True)
def store_settings(monkeypatch):
    """Deterministic settings regardless of the host environment."""
    monkeypatch.setattr(settings, "INFLUX_URL", "https://store.example.com/influx/")
    monkeypatch.setattr(settings, "INFLUX_BUCKET", "pet_health")
    monkeypatch.setattr(settings, "INFLUX_TOKEN", "secret-token")
    monkeypatch.setattr(settings, "TRACKED_PET_IDS", "221,105,302")
    monkeypatch.setattr(settings, "REPORT_TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "FUZZY_COLUMN_MATCH", True)
    monkeypatch.setattr(settings, "DAILY_STEP_GOAL", 10000)
    monkeypatch.setattr(settings, "OFFLINE_AFTER_MINUTES", 10)
    monkeypatch.setattr(settings, "REPORTS_BUCKET_NAME", "")
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "")
    monkeypatch.setattr(settings, "DEEPSEEK_API_KEY", "")
    monkeypatch.setattr(settings, "QWEN_API_KEY", "")


def make_response(
    status_code: int = 200,
    body: Optional[Any] = None,
    text: Optional[str] = None,
    content_type: str = "application/json",
) -> MagicMock:
    """Stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.headers = {"Content-Type": content_type}
    response.text = text if text is not None else json.dumps(body if body is not None else {})
    return response
