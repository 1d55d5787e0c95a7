"""Open-Meteo forecast snapshot models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CurrentConditions:
    temperature_c: float | None
    weather_code: int | None
    relative_humidity: float | None = None
    precipitation_mm: float | None = None


@dataclass(frozen=True)
class DailySummary:
    date: str  # YYYY-MM-DD, forecast-local
    max_temp_c: float | None
    min_temp_c: float | None
    precip_probability_max: float | None
    precip_sum_mm: float | None
    weather_code: int | None


@dataclass(frozen=True)
class HourlyPoint:
    timestamp: str  # forecast-local, e.g. "2026-10-19T14:00"
    temperature_c: float | None
    weather_code: int | None
    precip_probability: float | None


EMPTY_DAY = DailySummary(
    date="",
    max_temp_c=None,
    min_temp_c=None,
    precip_probability_max=None,
    precip_sum_mm=None,
    weather_code=None,
)


@dataclass(frozen=True)
class ForecastSnapshot:
    latitude: float
    longitude: float
    timezone: str
    current: CurrentConditions
    daily: tuple[DailySummary, ...]
    hourly: tuple[HourlyPoint, ...]
    fetched_at: str

    @property
    def today(self) -> DailySummary:
        """Index 0 of the daily arrays; an all-empty day if the API sent none."""
        return self.daily[0] if self.daily else EMPTY_DAY
