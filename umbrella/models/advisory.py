"""Umbrella advisory models."""

from dataclasses import dataclass
from enum import StrEnum


class AdvisoryLevel(StrEnum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class AdvisoryDecision:
    should_notify: bool
    level: AdvisoryLevel
    message: str
