"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field

from umbrella.models.settings import DEFAULT_HOUR, DEFAULT_MINUTE


class DeliveryMode(StrEnum):
    LOG = "log"
    WEBHOOK = "webhook"


class RegionConfig(BaseModel):
    model_config = {"extra": "forbid"}

    name: str
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class ForecastConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://api.open-meteo.com"
    timezone: str = "Asia/Seoul"
    forecast_days: int = Field(default=7, ge=1, le=16)
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=2.0, ge=0.0)


class NotificationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    enabled: bool = True
    delivery: DeliveryMode = DeliveryMode.LOG
    webhook_url: str = ""
    default_hour: int = Field(default=DEFAULT_HOUR, ge=0, le=23)
    default_minute: int = Field(default=DEFAULT_MINUTE, ge=0, le=59)


class DisplayConfig(BaseModel):
    model_config = {"extra": "forbid"}

    hourly_count: int = Field(default=12, ge=1, le=48)


class DaemonConfig(BaseModel):
    model_config = {"extra": "forbid"}

    poll_seconds: int = Field(default=30, ge=1)
    refresh_minutes: int = Field(default=60, ge=1)


class AppConfig(BaseModel):
    model_config = {"extra": "forbid"}

    forecast: ForecastConfig = ForecastConfig()
    notifications: NotificationConfig = NotificationConfig()
    display: DisplayConfig = DisplayConfig()
    daemon: DaemonConfig = DaemonConfig()
    regions: list[RegionConfig] = []
