"""Error taxonomy for the reminder engine and its collaborators."""


class UmbrellaError(Exception):
    """Base class for errors surfaced to the command line."""


class NetworkFailure(UmbrellaError):
    """Forecast fetch failed or returned an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StorageFailure(UmbrellaError):
    """A persisted setting could not be written (or cleared)."""


class SchedulingFailure(UmbrellaError):
    """A notification could not be registered, cancelled or delivered."""


class PermissionDenied(UmbrellaError):
    """The notification channel is unavailable; retrying will not help."""


class LocationRequired(UmbrellaError):
    """No location has been selected yet."""
