"""Configuration management for the pet health Lambda functions."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # InfluxDB 1.x compatible query endpoint, e.g. https://example.com/influx
    INFLUX_URL: str = ""
    INFLUX_BUCKET: str = "pet_health"  # Database name passed as ?db=
    INFLUX_TOKEN: str = ""  # Sent as "Authorization: Token <token>" when set
    INFLUX_MEASUREMENT: str = "pet_activity"
    INFLUX_TIMEOUT_SECONDS: float = 10.0
    INFLUX_LOOKBACK_DAYS: int = 8  # Today plus seven days of trend history
    INFLUX_ROW_LIMIT: int = 5000

    # Closed roster of tracker ids, comma separated
    TRACKED_PET_IDS: str = "221,105,302"

    # Normalization
    FUZZY_COLUMN_MATCH: bool = True
    DAILY_STEP_GOAL: int = 10000
    DEFAULT_STRIDE_M: float = 0.45
    OFFLINE_AFTER_MINUTES: int = 10
    REPORT_TIMEZONE: str = "UTC"
    POLL_INTERVAL_SECONDS: int = 300

    # Optional S3 archive of daily reports; empty disables archiving
    REPORTS_BUCKET_NAME: str = ""

    # LLM providers (all OpenAI-compatible endpoints)
    GEMINI_API_KEY: str = ""
    DEEPSEEK_API_KEY: str = ""
    QWEN_API_KEY: str = ""
    LLM_TIMEOUT_SECONDS: float = 30.0

    # Logging configuration
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def pet_roster(self) -> List[str]:
        """Tracker ids allowed to reach the store query."""
        return [pet_id.strip() for pet_id in self.TRACKED_PET_IDS.split(",") if pet_id.strip()]


# Global settings instance
settings = Settings()
