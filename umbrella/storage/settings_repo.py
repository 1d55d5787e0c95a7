"""Repository for the two persisted settings: location and reminder time.

Reads never fail: an absent or unreadable value falls back to the
documented default. Writes raise StorageFailure.
"""

import json
import logging
import sqlite3

from umbrella.errors import StorageFailure
from umbrella.models.common import epoch_ms
from umbrella.models.settings import NotificationTime, SelectedLocation

logger = logging.getLogger(__name__)

LOCATION_KEY = "location"
NOTIFICATION_TIME_KEY = "notificationTime"


# --- Raw key-value access ---

def get_value(conn: sqlite3.Connection, key: str) -> dict | None:
    """Get a JSON value. Raises sqlite3.Error / ValueError on failure."""
    row = conn.execute(
        "SELECT value FROM kv_store WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return json.loads(row[0])


def set_value(conn: sqlite3.Connection, key: str, value: dict) -> None:
    """Upsert a JSON value."""
    try:
        conn.execute(
            "INSERT INTO kv_store (key, value, updated_at) "
            "VALUES (?, ?, CURRENT_TIMESTAMP) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
            "updated_at = CURRENT_TIMESTAMP",
            (key, json.dumps(value)),
        )
        conn.commit()
    except sqlite3.Error as e:
        logger.error("Failed to save %s: %s", key, e)
        raise StorageFailure(f"Could not save {key}") from e


# --- Location ---

def save_location(
    conn: sqlite3.Connection, latitude: float, longitude: float, name: str
) -> SelectedLocation:
    location = SelectedLocation(
        latitude=latitude,
        longitude=longitude,
        display_name=name,
        saved_at_epoch_ms=epoch_ms(),
    )
    set_value(
        conn,
        LOCATION_KEY,
        {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "name": location.display_name,
            "timestamp": location.saved_at_epoch_ms,
        },
    )
    logger.info("Location saved: %s (%.4f, %.4f)", name, latitude, longitude)
    return location


def get_location(conn: sqlite3.Connection) -> SelectedLocation | None:
    """Saved location, or None on first run or an unreadable value."""
    try:
        data = get_value(conn, LOCATION_KEY)
        if data is None:
            return None
        return SelectedLocation(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            display_name=str(data.get("name", "")),
            saved_at_epoch_ms=int(data.get("timestamp", 0)),
        )
    except (sqlite3.Error, ValueError, KeyError, TypeError) as e:
        logger.warning("Location load failed, treating as unset: %s", e)
        return None


# --- Reminder time ---

def save_notification_time(
    conn: sqlite3.Connection, hour: int, minute: int
) -> NotificationTime:
    time = NotificationTime(hour=hour, minute=minute)
    set_value(
        conn,
        NOTIFICATION_TIME_KEY,
        {"hour": time.hour, "minute": time.minute, "timestamp": epoch_ms()},
    )
    logger.info("Notification time saved: %s", time.label())
    return time


def get_notification_time(
    conn: sqlite3.Connection, default: NotificationTime | None = None
) -> NotificationTime:
    """Saved reminder time, or the default (08:00) if absent or unreadable."""
    fallback = default or NotificationTime()
    try:
        data = get_value(conn, NOTIFICATION_TIME_KEY)
        if data is None:
            return fallback
        return NotificationTime(hour=int(data["hour"]), minute=int(data["minute"]))
    except (sqlite3.Error, ValueError, KeyError, TypeError) as e:
        logger.warning("Notification time load failed, using %s: %s", fallback.label(), e)
        return fallback


def clear_all(conn: sqlite3.Connection) -> None:
    """Remove both settings."""
    try:
        conn.execute(
            "DELETE FROM kv_store WHERE key IN (?, ?)",
            (LOCATION_KEY, NOTIFICATION_TIME_KEY),
        )
        conn.commit()
    except sqlite3.Error as e:
        logger.error("Failed to clear settings: %s", e)
        raise StorageFailure("Could not clear stored settings") from e
    logger.info("All settings cleared")
