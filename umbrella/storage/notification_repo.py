"""Repository for registered reminders and the delivery log."""

import json
import sqlite3
from typing import Any

from umbrella.models.notification import ScheduledNotification


def insert_scheduled(
    conn: sqlite3.Connection,
    hour: int,
    minute: int,
    title: str,
    body: str,
    payload: dict[str, Any],
) -> int:
    """Register a recurring reminder. Returns the row id."""
    cursor = conn.execute(
        "INSERT INTO scheduled_notifications (hour, minute, title, body, payload_json) "
        "VALUES (?, ?, ?, ?, ?)",
        (hour, minute, title, body, json.dumps(payload)),
    )
    conn.commit()
    assert cursor.lastrowid is not None
    return cursor.lastrowid


def delete_all_scheduled(conn: sqlite3.Connection) -> int:
    """Remove every registered reminder. Returns how many were removed."""
    cursor = conn.execute("DELETE FROM scheduled_notifications")
    conn.commit()
    return cursor.rowcount


def get_all_scheduled(conn: sqlite3.Connection) -> list[ScheduledNotification]:
    rows = conn.execute(
        "SELECT * FROM scheduled_notifications ORDER BY id"
    ).fetchall()
    return [_row_to_notification(r) for r in rows]


def mark_fired(
    conn: sqlite3.Connection, notification: ScheduledNotification, day: str
) -> None:
    """Record that a reminder went out on ``day``.

    The hour:minute slot is stored separately so it survives the trigger row
    being replaced by a reschedule.
    """
    conn.execute(
        "UPDATE scheduled_notifications SET last_fired_on = ? WHERE id = ?",
        (day, notification.id),
    )
    conn.execute(
        "INSERT OR IGNORE INTO fired_slots (day, hour, minute) VALUES (?, ?, ?)",
        (day, notification.hour, notification.minute),
    )
    conn.commit()


def get_fired_slots(conn: sqlite3.Connection, day: str) -> set[tuple[int, int]]:
    rows = conn.execute(
        "SELECT hour, minute FROM fired_slots WHERE day = ?", (day,)
    ).fetchall()
    return {(r["hour"], r["minute"]) for r in rows}


def log_delivery(conn: sqlite3.Connection, kind: str, title: str, body: str) -> int:
    cursor = conn.execute(
        "INSERT INTO delivered_notifications (kind, title, body) VALUES (?, ?, ?)",
        (kind, title, body),
    )
    conn.commit()
    assert cursor.lastrowid is not None
    return cursor.lastrowid


def get_recent_deliveries(conn: sqlite3.Connection, limit: int = 20) -> list[dict]:
    rows = conn.execute(
        "SELECT * FROM delivered_notifications ORDER BY id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    return [dict(r) for r in rows]


def _row_to_notification(row: sqlite3.Row) -> ScheduledNotification:
    return ScheduledNotification(
        id=row["id"],
        hour=row["hour"],
        minute=row["minute"],
        title=row["title"],
        body=row["body"],
        payload=json.loads(row["payload_json"]),
        created_at=row["created_at"],
        last_fired_on=row["last_fired_on"],
    )
