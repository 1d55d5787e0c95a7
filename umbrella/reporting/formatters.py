"""Output formatters for the forecast home view."""

import json
from datetime import datetime

from umbrella.advisory.engine import format_number, round_temp
from umbrella.advisory.weather_codes import describe_weather, weather_icon
from umbrella.app import HomeView
from umbrella.models.forecast import ForecastSnapshot, HourlyPoint
from umbrella.models.notification import Denied


def upcoming_hours(
    snapshot: ForecastSnapshot, now: datetime, count: int = 12
) -> list[HourlyPoint]:
    """Hourly points at or after ``now`` (forecast-local, naive), first ``count``."""
    result = []
    for point in snapshot.hourly:
        try:
            ts = datetime.fromisoformat(point.timestamp)
        except ValueError:
            continue
        if ts >= now:
            result.append(point)
            if len(result) == count:
                break
    return result


def format_home_text(view: HomeView, now: datetime, hourly_count: int = 12) -> str:
    """Plain text rendering of current, today and hourly conditions."""
    snap = view.snapshot
    today = snap.today
    lines = [
        f"📍 {view.location.display_name or 'Unknown location'}",
        f"{weather_icon(snap.current.weather_code)} "
        f"{round_temp(snap.current.temperature_c)}°C "
        f"{describe_weather(snap.current.weather_code)}",
        "",
        "Today: "
        f"high {round_temp(today.max_temp_c)}°C | "
        f"low {round_temp(today.min_temp_c)}°C | "
        f"rain {format_number(today.precip_probability_max or 0)}% | "
        f"{format_number(today.precip_sum_mm or 0)}mm",
        f"Umbrella ({view.decision.level}): {view.decision.message}",
        "",
        "Hourly:",
    ]
    for point in upcoming_hours(snap, now, hourly_count):
        hour = datetime.fromisoformat(point.timestamp).hour
        lines.append(
            f"  {hour:02d}h {weather_icon(point.weather_code)} "
            f"{round_temp(point.temperature_c)}° "
            f"{format_number(point.precip_probability or 0)}%"
        )

    reminder = (
        f"set for {view.notification_time.label()} daily"
        if view.reminder_scheduled
        else "not needed today"
    )
    lines.append("")
    lines.append(f"Reminder: {reminder}")
    if isinstance(view.permission, Denied):
        lines.append(f"Notifications unavailable: {view.permission.reason}")
    return "\n".join(lines)


def format_home_json(view: HomeView) -> str:
    """JSON rendering for scripting."""
    snap = view.snapshot
    today = snap.today
    data = {
        "location": {
            "name": view.location.display_name,
            "latitude": view.location.latitude,
            "longitude": view.location.longitude,
        },
        "current": {
            "temperature_c": snap.current.temperature_c,
            "weather_code": snap.current.weather_code,
            "description": describe_weather(snap.current.weather_code),
        },
        "today": {
            "date": today.date,
            "max_temp_c": today.max_temp_c,
            "min_temp_c": today.min_temp_c,
            "precip_probability_max": today.precip_probability_max,
            "precip_sum_mm": today.precip_sum_mm,
            "weather_code": today.weather_code,
        },
        "advisory": {
            "level": view.decision.level.value,
            "should_notify": view.decision.should_notify,
            "message": view.decision.message,
        },
        "reminder": {
            "scheduled": view.reminder_scheduled,
            "time": view.notification_time.label(),
        },
        "fetched_at": snap.fetched_at,
    }
    return json.dumps(data, indent=2, ensure_ascii=False)
