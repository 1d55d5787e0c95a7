"""Fired reminder slots, kept apart from the trigger rows that get replaced on reschedule."""

import sqlite3

DDL = [
    """
    CREATE TABLE IF NOT EXISTS fired_slots (
        day TEXT NOT NULL,
        hour INTEGER NOT NULL CHECK (hour BETWEEN 0 AND 23),
        minute INTEGER NOT NULL CHECK (minute BETWEEN 0 AND 59),
        fired_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (day, hour, minute)
    )
    """,
]


def up(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
    conn.commit()
