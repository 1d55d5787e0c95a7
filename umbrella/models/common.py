"""Common helpers shared across models."""

import time
from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def epoch_ms() -> int:
    """Milliseconds since the Unix epoch, used to stamp persisted settings."""
    return int(time.time() * 1000)
