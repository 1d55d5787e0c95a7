"""Rain advisory engine: umbrella decision, message, and reminder scheduling."""

import logging
import math

from umbrella.models.advisory import AdvisoryDecision, AdvisoryLevel
from umbrella.models.forecast import ForecastSnapshot
from umbrella.notify.scheduler import NotificationScheduler

logger = logging.getLogger(__name__)

# Inclusive lower bounds, checked from the top.
HIGH_PROBABILITY = 70
HIGH_PRECIP_MM = 5.0
MEDIUM_PROBABILITY = 50
MEDIUM_PRECIP_MM = 1.0
LOW_PROBABILITY = 30
LOW_PRECIP_MM = 0.1

# Strict bounds for the standalone rain check.
TRIGGER_PROBABILITY = 30
TRIGGER_PRECIP_MM = 0.1

REMINDER_TITLE = "🌧️ Take an umbrella!"

LEAD_INS = {
    AdvisoryLevel.HIGH: "Umbrella essential!",
    AdvisoryLevel.MEDIUM: "Bring an umbrella.",
    AdvisoryLevel.LOW: "Keep an umbrella handy.",
    AdvisoryLevel.NONE: "No umbrella needed.",
}


def rain_inputs(snapshot: ForecastSnapshot) -> tuple[float, float]:
    """Today's (rain probability %, precipitation mm); missing values read as 0."""
    today = snapshot.today
    return today.precip_probability_max or 0, today.precip_sum_mm or 0


def classify(rain_probability: float, precipitation_mm: float) -> AdvisoryLevel:
    if rain_probability >= HIGH_PROBABILITY or precipitation_mm >= HIGH_PRECIP_MM:
        return AdvisoryLevel.HIGH
    if rain_probability >= MEDIUM_PROBABILITY or precipitation_mm >= MEDIUM_PRECIP_MM:
        return AdvisoryLevel.MEDIUM
    if rain_probability >= LOW_PROBABILITY or precipitation_mm >= LOW_PRECIP_MM:
        return AdvisoryLevel.LOW
    return AdvisoryLevel.NONE


def decide(snapshot: ForecastSnapshot) -> AdvisoryDecision:
    """Classify today's rain risk and compose the display message. Pure."""
    rain_probability, precipitation_mm = rain_inputs(snapshot)
    level = classify(rain_probability, precipitation_mm)
    message = f"{LEAD_INS[level]} {compose_body(snapshot)}"
    return AdvisoryDecision(
        should_notify=level != AdvisoryLevel.NONE,
        level=level,
        message=message,
    )


def should_schedule(snapshot: ForecastSnapshot) -> bool:
    """Standalone rain check with strict bounds (>30%, >0.1mm).

    Disagrees with ``decide`` at exactly 30% or exactly 0.1mm, where
    ``decide`` already reports a low advisory.
    """
    rain_probability, precipitation_mm = rain_inputs(snapshot)
    return (
        rain_probability > TRIGGER_PROBABILITY
        or precipitation_mm > TRIGGER_PRECIP_MM
    )


def precipitation_descriptor(precipitation_mm: float) -> str:
    if precipitation_mm >= 10:
        return "heavy rain"
    if precipitation_mm >= 5:
        return "moderate rain"
    if precipitation_mm >= 1:
        return "light rain"
    if precipitation_mm > 0:
        return "slight rain"
    return "no data"


def compose_body(snapshot: ForecastSnapshot) -> str:
    """Notification body: probability, volume with descriptor, high/low."""
    rain_probability, precipitation_mm = rain_inputs(snapshot)
    max_temp = round_temp(snapshot.today.max_temp_c)
    min_temp = round_temp(snapshot.today.min_temp_c)

    if precipitation_mm > 0:
        precip_text = (
            f"precipitation {format_number(precipitation_mm)}mm "
            f"({precipitation_descriptor(precipitation_mm)})"
        )
    else:
        precip_text = "precipitation: no data"

    return (
        f"Rain probability {format_number(rain_probability)}%, {precip_text}, "
        f"high {max_temp}°C, low {min_temp}°C"
    )


def round_temp(value: float | None) -> int:
    """Round half up to the nearest degree; missing reads as 0."""
    return math.floor((value or 0) + 0.5)


def format_number(value: float) -> str:
    """Render 80.0 as '80' and 5.2 as '5.2'."""
    return f"{value:g}"


class AdvisoryEngine:
    """Keeps at most one recurring rain reminder registered."""

    def __init__(self, scheduler: NotificationScheduler):
        self.scheduler = scheduler

    def schedule_if_needed(
        self, snapshot: ForecastSnapshot, hour: int, minute: int
    ) -> bool:
        """Cancel every registered reminder, then re-register one if rain is due.

        Returns True if a reminder was registered. Scheduler failures
        propagate.
        """
        self.scheduler.cancel_all()

        decision = decide(snapshot)
        if not decision.should_notify:
            logger.info("No rain expected (%s), reminder cleared", decision.level)
            return False

        rain_probability, precipitation_mm = rain_inputs(snapshot)
        payload = {
            "rain_probability": rain_probability,
            "precipitation_mm": precipitation_mm,
            "max_temp_c": round_temp(snapshot.today.max_temp_c),
            "min_temp_c": round_temp(snapshot.today.min_temp_c),
            "level": decision.level.value,
        }
        self.scheduler.schedule_recurring(
            hour, minute, REMINDER_TITLE, compose_body(snapshot), payload
        )
        logger.info(
            "Rain reminder (%s) scheduled daily at %02d:%02d",
            decision.level, hour, minute,
        )
        return True
