"""Application object: wires collaborators once and runs the user-facing flows."""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from umbrella.advisory.engine import AdvisoryEngine, decide, should_schedule
from umbrella.config.schema import AppConfig, RegionConfig
from umbrella.errors import LocationRequired, PermissionDenied
from umbrella.ingest.forecast_fetcher import ForecastFetcher
from umbrella.ingest.open_meteo_client import OpenMeteoClient
from umbrella.models.advisory import AdvisoryDecision
from umbrella.models.forecast import ForecastSnapshot
from umbrella.models.notification import Denied, PermissionResult
from umbrella.models.settings import NotificationTime, SelectedLocation
from umbrella.notify.scheduler import NotificationScheduler, build_delivery
from umbrella.storage import settings_repo
from umbrella.storage.database import open_database

logger = logging.getLogger(__name__)

CURRENT_LOCATION_NAME = "Current location"
TEST_TITLE = "🌧️ Test notification"
TEST_BODY = (
    "Rain probability 80%, precipitation 5.2mm (moderate rain), "
    "high 23°C, low 18°C"
)


@dataclass(frozen=True)
class HomeView:
    location: SelectedLocation
    snapshot: ForecastSnapshot
    decision: AdvisoryDecision
    notification_time: NotificationTime
    reminder_scheduled: bool
    permission: PermissionResult


class WeatherApp:
    """Explicit client object; build once with ``build_app`` and pass around."""

    def __init__(
        self,
        config: AppConfig,
        conn: sqlite3.Connection,
        fetcher: ForecastFetcher,
        scheduler: NotificationScheduler,
    ):
        self.config = config
        self.conn = conn
        self.fetcher = fetcher
        self.scheduler = scheduler
        self.engine = AdvisoryEngine(scheduler)

    # --- Home ---

    def load_weather(self) -> HomeView:
        """Fetch the forecast for the saved location and refresh the reminder.

        Raises LocationRequired on first run, NetworkFailure if the fetch
        fails, SchedulingFailure if the reminder cannot be registered.
        """
        location = settings_repo.get_location(self.conn)
        if location is None:
            raise LocationRequired("No location selected; choose a region first")

        snapshot = self.fetcher.fetch(location.latitude, location.longitude)
        time = self.notification_time()
        scheduled = self.engine.schedule_if_needed(snapshot, time.hour, time.minute)

        rain_check = "rain likely" if should_schedule(snapshot) else "rain unlikely"
        logger.info(
            "Forecast loaded for %s: %s, reminder %s",
            location.display_name, rain_check,
            f"set for {time.label()}" if scheduled else "not set",
        )

        permission = self.scheduler.request_permission()
        if isinstance(permission, Denied):
            logger.warning("Notifications unavailable: %s", permission.reason)

        return HomeView(
            location=location,
            snapshot=snapshot,
            decision=decide(snapshot),
            notification_time=time,
            reminder_scheduled=scheduled,
            permission=permission,
        )

    # --- Regions ---

    def search_regions(self, query: str = "") -> list[RegionConfig]:
        q = query.strip().lower()
        return [r for r in self.config.regions if q in r.name.lower()]

    def select_region(self, name: str) -> SelectedLocation:
        for region in self.config.regions:
            if region.name.lower() == name.strip().lower():
                return settings_repo.save_location(
                    self.conn, region.latitude, region.longitude, region.name
                )
        raise KeyError(f"Unknown region: {name}")

    def set_custom_location(
        self, latitude: float, longitude: float, name: str = CURRENT_LOCATION_NAME
    ) -> SelectedLocation:
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise ValueError(f"Invalid coordinate: {latitude}, {longitude}")
        return settings_repo.save_location(self.conn, latitude, longitude, name)

    def current_location(self) -> SelectedLocation | None:
        return settings_repo.get_location(self.conn)

    # --- Reminder time ---

    def notification_time(self) -> NotificationTime:
        default = NotificationTime(
            self.config.notifications.default_hour,
            self.config.notifications.default_minute,
        )
        return settings_repo.get_notification_time(self.conn, default)

    def update_notification_time(self, hour: int, minute: int) -> bool:
        """Persist a new reminder time and reschedule against a fresh forecast.

        Returns whether a reminder is now registered. Without a saved
        location only the time is stored.
        """
        time = settings_repo.save_notification_time(self.conn, hour, minute)
        location = settings_repo.get_location(self.conn)
        if location is None:
            logger.info("No location yet; reminder will be set on first forecast")
            return False
        snapshot = self.fetcher.fetch(location.latitude, location.longitude)
        return self.engine.schedule_if_needed(snapshot, time.hour, time.minute)

    def reset_settings(self) -> bool:
        """Put the reminder time back to the default and reschedule."""
        default = NotificationTime(
            self.config.notifications.default_hour,
            self.config.notifications.default_minute,
        )
        return self.update_notification_time(default.hour, default.minute)

    def clear_all_data(self) -> None:
        settings_repo.clear_all(self.conn)
        self.scheduler.cancel_all()

    # --- Notifications ---

    def send_test_notification(self) -> None:
        permission = self.scheduler.request_permission()
        if isinstance(permission, Denied):
            raise PermissionDenied(permission.reason)
        self.scheduler.send_immediate(TEST_TITLE, TEST_BODY)

    def close(self) -> None:
        self.conn.close()


def build_app(config: AppConfig, db_path: str | Path) -> WeatherApp:
    """Construct the app and its collaborators."""
    conn = open_database(db_path)
    fc = config.forecast
    client = OpenMeteoClient(
        base_url=fc.base_url,
        timezone=fc.timezone,
        forecast_days=fc.forecast_days,
        timeout=fc.timeout_seconds,
        max_retries=fc.max_retries,
        retry_base_delay=fc.retry_base_delay,
    )
    scheduler = NotificationScheduler(
        conn,
        build_delivery(config.notifications),
        enabled=config.notifications.enabled,
    )
    return WeatherApp(config, conn, ForecastFetcher(client), scheduler)
