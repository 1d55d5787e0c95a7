"""Forecast fetcher: turns Open-Meteo payloads into ForecastSnapshots."""

import logging
from typing import Any

import httpx

from umbrella.errors import NetworkFailure
from umbrella.ingest.open_meteo_client import OpenMeteoClient
from umbrella.models.common import utc_now_iso
from umbrella.models.forecast import (
    CurrentConditions,
    DailySummary,
    ForecastSnapshot,
    HourlyPoint,
)

logger = logging.getLogger(__name__)


class ForecastFetcher:
    def __init__(self, client: OpenMeteoClient):
        self.client = client

    def fetch(self, latitude: float, longitude: float) -> ForecastSnapshot:
        """Fetch a fresh snapshot for a coordinate.

        Every call goes to the network; snapshots are never cached.
        """
        try:
            raw = self.client.get_forecast(latitude, longitude)
        except httpx.HTTPStatusError as e:
            logger.error(
                "Forecast fetch for %.4f,%.4f failed: HTTP %d",
                latitude, longitude, e.response.status_code,
            )
            raise NetworkFailure(
                f"Forecast request failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                "Forecast fetch for %.4f,%.4f failed: %s", latitude, longitude, e
            )
            raise NetworkFailure(f"Forecast request failed: {e}") from e

        try:
            return parse_snapshot(raw, latitude, longitude)
        except NetworkFailure as e:
            logger.error(
                "Forecast payload for %.4f,%.4f rejected: %s", latitude, longitude, e
            )
            raise


def parse_snapshot(raw: Any, latitude: float, longitude: float) -> ForecastSnapshot:
    """Build a snapshot from the parallel-array JSON document.

    Raises NetworkFailure if the document lacks a ``daily`` object or any
    section has the wrong shape.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("daily"), dict):
        raise NetworkFailure("Forecast payload has no daily section")

    current = raw.get("current") or {}
    hourly = raw.get("hourly") or {}
    if not isinstance(current, dict) or not isinstance(hourly, dict):
        raise NetworkFailure("Forecast payload has a malformed current or hourly section")

    try:
        return _build_snapshot(raw, current, hourly, latitude, longitude)
    except (TypeError, ValueError, OverflowError) as e:
        raise NetworkFailure(f"Forecast payload is malformed: {e}") from e


def _build_snapshot(
    raw: dict, current: dict, hourly: dict, latitude: float, longitude: float
) -> ForecastSnapshot:
    daily = raw["daily"]
    return ForecastSnapshot(
        latitude=float(raw.get("latitude", latitude)),
        longitude=float(raw.get("longitude", longitude)),
        timezone=str(raw.get("timezone", "")),
        current=CurrentConditions(
            temperature_c=_num(current.get("temperature_2m")),
            weather_code=_code(current.get("weather_code")),
            relative_humidity=_num(current.get("relative_humidity_2m")),
            precipitation_mm=_num(current.get("precipitation")),
        ),
        daily=tuple(
            DailySummary(
                date=str(day),
                max_temp_c=_num(_at(daily, "temperature_2m_max", i)),
                min_temp_c=_num(_at(daily, "temperature_2m_min", i)),
                precip_probability_max=_num(
                    _at(daily, "precipitation_probability_max", i)
                ),
                precip_sum_mm=_num(_at(daily, "precipitation_sum", i)),
                weather_code=_code(_at(daily, "weather_code", i)),
            )
            for i, day in enumerate(_days(daily))
        ),
        hourly=tuple(
            HourlyPoint(
                timestamp=str(ts),
                temperature_c=_num(_at(hourly, "temperature_2m", i)),
                weather_code=_code(_at(hourly, "weather_code", i)),
                precip_probability=_num(_at(hourly, "precipitation_probability", i)),
            )
            for i, ts in enumerate(_array(hourly, "time"))
        ),
        fetched_at=utc_now_iso(),
    )


def _days(daily: dict) -> list:
    """Daily dates, or placeholders sized to the longest field if ``time`` is absent."""
    times = _array(daily, "time")
    if times:
        return times
    longest = max(
        (len(v) for v in daily.values() if isinstance(v, list)), default=0
    )
    return [""] * longest


def _array(block: dict, key: str) -> list:
    values = block.get(key)
    if values is None:
        return []
    if not isinstance(values, list):
        raise TypeError(f"{key} is {type(values).__name__}, expected an array")
    return values


def _at(block: dict, key: str, index: int) -> Any:
    values = block.get(key)
    if not isinstance(values, list) or index >= len(values):
        return None
    return values[index]


def _num(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _code(value: Any) -> int | None:
    num = _num(value)
    return None if num is None else int(num)
