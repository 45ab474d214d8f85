"""
Exceptions raised by the scheduling path.

Authorization denial is not an exception: it is carried by AuthorizationStatus.
Shared store failures are absorbed inside the store and never reach callers.
"""


class NotificationCenterError(Exception):
    """The notification center refused to register a request."""


class SchedulingError(Exception):
    """A one-shot reminder could not be registered with the notification center."""

    def __init__(self, delay_seconds: int, reason: str):
        super().__init__(f"Could not schedule reminder in {delay_seconds}s: {reason}")
        self.delay_seconds = delay_seconds
        self.reason = reason


class InvalidDelayError(ValueError):
    """Delay outside the allowed [MIN_DELAY_SECONDS, MAX_DELAY_SECONDS] window."""
