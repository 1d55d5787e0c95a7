"""Notification trigger and permission models."""

from dataclasses import dataclass, field
from typing import Any, TypeAlias


@dataclass(frozen=True)
class ScheduledNotification:
    id: int
    hour: int
    minute: int
    title: str
    body: str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    last_fired_on: str | None = None  # YYYY-MM-DD, local


@dataclass(frozen=True)
class Granted:
    pass


@dataclass(frozen=True)
class Denied:
    reason: str


PermissionResult: TypeAlias = Granted | Denied
