"""Persisted user settings: selected location and reminder time."""

from dataclasses import dataclass

DEFAULT_HOUR = 8
DEFAULT_MINUTE = 0


@dataclass(frozen=True)
class NotificationTime:
    hour: int = DEFAULT_HOUR
    minute: int = DEFAULT_MINUTE

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be 0-23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be 0-59, got {self.minute}")

    @classmethod
    def parse(cls, text: str) -> "NotificationTime":
        """Parse an ``HH:MM`` string."""
        hour, sep, minute = text.strip().partition(":")
        if not sep:
            raise ValueError(f"expected HH:MM, got {text!r}")
        return cls(hour=int(hour), minute=int(minute))

    def label(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class SelectedLocation:
    latitude: float
    longitude: float
    display_name: str
    saved_at_epoch_ms: int
