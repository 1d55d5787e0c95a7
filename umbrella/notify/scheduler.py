"""Notification scheduler: SQLite-backed daily triggers plus a delivery adapter."""

import logging
import sqlite3
from datetime import datetime, timedelta
from typing import Any

from umbrella.config.schema import DeliveryMode, NotificationConfig
from umbrella.errors import SchedulingFailure
from umbrella.models.notification import (
    Denied,
    Granted,
    PermissionResult,
    ScheduledNotification,
)
from umbrella.notify.delivery import LogDelivery, WebhookDelivery
from umbrella.storage import notification_repo

logger = logging.getLogger(__name__)

DEFAULT_FIRE_WINDOW = timedelta(minutes=5)


class NotificationScheduler:
    def __init__(
        self,
        conn: sqlite3.Connection,
        delivery: LogDelivery | WebhookDelivery,
        enabled: bool = True,
    ):
        self.conn = conn
        self.delivery = delivery
        self.enabled = enabled

    def request_permission(self) -> PermissionResult:
        """Report whether notifications can be delivered at all."""
        if not self.enabled:
            return Denied("Notifications are disabled (notifications.enabled = false)")
        if isinstance(self.delivery, WebhookDelivery) and not self.delivery.url:
            return Denied("Webhook delivery selected but notifications.webhook_url is empty")
        return Granted()

    def cancel_all(self) -> None:
        """Remove every registered reminder. A no-op when none exist."""
        try:
            removed = notification_repo.delete_all_scheduled(self.conn)
        except sqlite3.Error as e:
            raise SchedulingFailure("Could not cancel scheduled notifications") from e
        if removed:
            logger.info("Cancelled %d scheduled notification(s)", removed)

    def schedule_recurring(
        self,
        hour: int,
        minute: int,
        title: str,
        body: str,
        payload: dict[str, Any] | None = None,
    ) -> int:
        """Register a reminder that fires every day at hour:minute local time."""
        try:
            return notification_repo.insert_scheduled(
                self.conn, hour, minute, title, body, payload or {}
            )
        except sqlite3.Error as e:
            raise SchedulingFailure(
                f"Could not schedule notification at {hour:02d}:{minute:02d}"
            ) from e

    def send_immediate(self, title: str, body: str) -> None:
        self._deliver("immediate", title, body, None)

    def list_scheduled(self) -> list[ScheduledNotification]:
        return notification_repo.get_all_scheduled(self.conn)

    def due(
        self, now: datetime, window: timedelta = DEFAULT_FIRE_WINDOW
    ) -> list[ScheduledNotification]:
        """Reminders whose time today falls in [trigger, trigger + window].

        ``now`` is local wall-clock time. A reminder whose hour:minute slot
        already fired today is skipped, even if it was rescheduled since.
        """
        today = now.date().isoformat()
        fired = notification_repo.get_fired_slots(self.conn, today)
        result = []
        for n in self.list_scheduled():
            if n.last_fired_on == today or (n.hour, n.minute) in fired:
                continue
            trigger = now.replace(hour=n.hour, minute=n.minute, second=0, microsecond=0)
            if trigger <= now <= trigger + window:
                result.append(n)
        return result

    def fire(self, notification: ScheduledNotification, now: datetime) -> None:
        self._deliver("recurring", notification.title, notification.body, notification.payload)
        try:
            notification_repo.mark_fired(self.conn, notification, now.date().isoformat())
        except sqlite3.Error as e:
            raise SchedulingFailure(
                f"Delivered reminder {notification.id} but could not mark it fired"
            ) from e

    def _deliver(
        self, kind: str, title: str, body: str, payload: dict[str, Any] | None
    ) -> None:
        self.delivery.deliver(title, body, payload)
        try:
            notification_repo.log_delivery(self.conn, kind, title, body)
        except sqlite3.Error:
            logger.exception("Delivered %s notification but could not log it", kind)


def build_delivery(config: NotificationConfig) -> LogDelivery | WebhookDelivery:
    if config.delivery == DeliveryMode.WEBHOOK:
        return WebhookDelivery(config.webhook_url)
    return LogDelivery()
