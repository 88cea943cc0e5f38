"""Data models for the pet health report pipeline.

Attribute names are snake_case in Python; the JSON consumed by the dashboard
uses camelCase, so every model dumps with ``by_alias=True`` and accepts both
spellings on input.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Coordinate = Tuple[float, float]


class ActiveLevel(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"


class VitalStatus(str, Enum):
    NORMAL = "NORMAL"
    WARNING = "WARNING"


class DataStatus(str, Enum):
    NORMAL = "NORMAL"
    DEGRADED = "DEGRADED"
    OFFLINE = "OFFLINE"


class TrendLabel(str, Enum):
    UP = "UP"
    STABLE = "STABLE"
    DOWN = "DOWN"


class SourceKind(str, Enum):
    LIVE = "LIVE"
    DEMO = "DEMO"


class FetchState(str, Enum):
    """States of one report fetch; every state except QUERYING is terminal."""

    QUERYING = "QUERYING"
    SUCCESS = "SUCCESS"
    EMPTY = "EMPTY"
    STORE_ERROR = "STORE_ERROR"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    CONFIG_MISSING = "CONFIG_MISSING"


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActivityStats(CamelModel):
    steps: int = Field(ge=0)
    completion_rate: float = Field(ge=0.0, le=1.0)
    active_level: ActiveLevel
    stride: Optional[float] = None


class VitalStats(CamelModel):
    avg_temp: float
    avg_pressure: Optional[int] = None
    avg_height: Optional[float] = None
    status: VitalStatus


class DeviceStats(CamelModel):
    battery: float
    data_status: DataStatus
    rsrp: int
    last_seen: datetime


class TrendStats(CamelModel):
    vs_yesterday: float = 0.0
    vs_7_day_avg: float = Field(default=0.0, alias="vs7DayAvg")
    trend_label: TrendLabel = TrendLabel.STABLE


class DailyReport(CamelModel):
    """Canonical report rendered by the dashboard and fed to the summarizer."""

    report_date: date = Field(alias="date")
    pet_id: str
    species_id: int = 1
    summary: str = ""
    advice: List[str] = Field(default_factory=list)
    activity: ActivityStats
    vitals: VitalStats
    trend: TrendStats
    device: DeviceStats
    coordinates: List[Coordinate] = Field(min_length=1)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class RawMetrics(BaseModel):
    """Aggregated scalars for one window, before classification."""

    steps: int = 0
    avg_temp: float
    avg_pressure: int
    avg_height: Optional[float] = None
    battery: float
    rsrp: int
    last_seen: Optional[datetime] = None
    species_id: Optional[int] = None
    stride: Optional[float] = None
    tracker_id: Optional[str] = None
    coordinates: List[Coordinate] = Field(default_factory=list)
    sample_count: int = 0
    defaulted_fields: List[str] = Field(default_factory=list)


class ReportIdentity(BaseModel):
    """Who and which day a report describes."""

    pet_id: str
    report_date: date
    species_id: Optional[int] = None


class FetchDiagnostic(CamelModel):
    """Status signal that travels with every report."""

    using_fallback: bool
    reason: str
    source_kind: SourceKind
    state: FetchState


class ReportResult(BaseModel):
    """A report plus the diagnostic explaining where it came from."""

    report: DailyReport
    diagnostic: FetchDiagnostic

    def to_json_dict(self) -> dict:
        return {
            "report": self.report.to_json_dict(),
            "diagnostic": self.diagnostic.model_dump(mode="json", by_alias=True),
        }
