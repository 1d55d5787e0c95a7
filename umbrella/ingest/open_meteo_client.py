"""Open-Meteo forecast API client with retry and rate limit handling."""

import logging
import time

import httpx

logger = logging.getLogger(__name__)

OPEN_METEO_BASE_URL = "https://api.open-meteo.com"
DEFAULT_USER_AGENT = "umbrella-reminder/0.1.0"

CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,precipitation,weather_code"
HOURLY_FIELDS = "temperature_2m,precipitation_probability,precipitation,weather_code"
DAILY_FIELDS = (
    "temperature_2m_max,temperature_2m_min,"
    "precipitation_probability_max,precipitation_sum,weather_code"
)

RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


class OpenMeteoClient:
    def __init__(
        self,
        base_url: str = OPEN_METEO_BASE_URL,
        timezone: str = "Asia/Seoul",
        forecast_days: int = 7,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_base_delay: float = 2.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timezone = timezone
        self.forecast_days = forecast_days
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    def get_forecast(self, latitude: float, longitude: float) -> dict:
        """Fetch current, hourly and daily forecast for a coordinate.

        Retries on 429/5xx and transport errors with exponential backoff.
        """
        url = f"{self.base_url}/v1/forecast"
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": CURRENT_FIELDS,
            "hourly": HOURLY_FIELDS,
            "daily": DAILY_FIELDS,
            "timezone": self.timezone,
            "forecast_days": self.forecast_days,
        }
        headers = {"User-Agent": self.user_agent, "Accept": "application/json"}

        last_error: Exception | None = None
        for attempt in range(self.max_retries + 1):
            try:
                resp = httpx.get(
                    url, params=params, headers=headers, timeout=self.timeout
                )
                if (
                    resp.status_code in RETRY_STATUS_CODES
                    and attempt < self.max_retries
                ):
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "Open-Meteo returned %d, retrying in %.1fs (attempt %d/%d)",
                        resp.status_code, delay, attempt + 1, self.max_retries,
                    )
                    time.sleep(delay)
                    continue
                resp.raise_for_status()
                return resp.json()
            except httpx.RequestError as e:
                last_error = e
                if attempt < self.max_retries:
                    delay = self.retry_base_delay * (2**attempt)
                    logger.warning(
                        "Open-Meteo request error, retrying in %.1fs: %s", delay, e
                    )
                    time.sleep(delay)
                    continue
                raise

        assert last_error is not None
        raise last_error
