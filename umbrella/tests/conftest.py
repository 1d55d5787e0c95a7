"""Shared test fixtures."""

import json
import sqlite3
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import yaml

from umbrella.app import WeatherApp
from umbrella.config.defaults import DEFAULT_REGIONS
from umbrella.config.schema import AppConfig
from umbrella.ingest.forecast_fetcher import ForecastFetcher
from umbrella.models.forecast import (
    CurrentConditions,
    DailySummary,
    ForecastSnapshot,
    HourlyPoint,
)
from umbrella.notify.delivery import LogDelivery
from umbrella.notify.scheduler import NotificationScheduler
from umbrella.storage.database import connect, run_migrations


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def seoul_payload(fixtures_dir: Path) -> dict:
    with open(fixtures_dir / "open_meteo_seoul.json") as f:
        return json.load(f)


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    conn = connect(tmp_path / "test.db")
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def scheduler(db: sqlite3.Connection) -> NotificationScheduler:
    return NotificationScheduler(db, LogDelivery())


@pytest.fixture
def default_config() -> AppConfig:
    return AppConfig(regions=DEFAULT_REGIONS)


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "forecast": {"timezone": "Asia/Seoul", "forecast_days": 7},
        "notifications": {"delivery": "log"},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def make_snapshot() -> Callable[..., ForecastSnapshot]:
    """Factory for snapshots with today's rain fields set explicitly."""

    def _make(
        rain_probability: float | None = 0,
        precipitation_mm: float | None = 0,
        max_temp: float | None = 20.0,
        min_temp: float | None = 10.0,
        weather_code: int | None = 0,
    ) -> ForecastSnapshot:
        return ForecastSnapshot(
            latitude=37.5665,
            longitude=126.978,
            timezone="Asia/Seoul",
            current=CurrentConditions(temperature_c=15.0, weather_code=weather_code),
            daily=(
                DailySummary(
                    date="2026-10-19",
                    max_temp_c=max_temp,
                    min_temp_c=min_temp,
                    precip_probability_max=rain_probability,
                    precip_sum_mm=precipitation_mm,
                    weather_code=weather_code,
                ),
            ),
            hourly=(
                HourlyPoint("2026-10-19T08:00", 14.0, weather_code, rain_probability),
                HourlyPoint("2026-10-19T09:00", 15.0, weather_code, rain_probability),
            ),
            fetched_at="2026-10-19T00:00:00+00:00",
        )

    return _make


@pytest.fixture
def mock_fetcher() -> MagicMock:
    return MagicMock(spec=ForecastFetcher)


@pytest.fixture
def app(
    default_config: AppConfig,
    db: sqlite3.Connection,
    mock_fetcher: MagicMock,
    scheduler: NotificationScheduler,
) -> WeatherApp:
    return WeatherApp(default_config, db, mock_fetcher, scheduler)
