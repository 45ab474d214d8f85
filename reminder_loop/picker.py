"""Delay picker shared by the main and content surfaces."""
import math

from reminder_loop.schemas import DEFAULT_DELAY_SECONDS, MAX_DELAY_SECONDS, MIN_DELAY_SECONDS


def clamp_delay(seconds: float) -> int:
    """Truncate a slider position to whole seconds and clamp it into the allowed window."""
    if seconds is None or math.isnan(seconds):
        return DEFAULT_DELAY_SECONDS
    if math.isinf(seconds):
        return MAX_DELAY_SECONDS if seconds > 0 else MIN_DELAY_SECONDS
    return max(MIN_DELAY_SECONDS, min(MAX_DELAY_SECONDS, int(seconds)))


def is_valid_delay(seconds: int) -> bool:
    return isinstance(seconds, int) and not isinstance(seconds, bool) and MIN_DELAY_SECONDS <= seconds <= MAX_DELAY_SECONDS


class DelayPicker:
    minimum = MIN_DELAY_SECONDS
    maximum = MAX_DELAY_SECONDS

    def __init__(self, value: float = DEFAULT_DELAY_SECONDS):
        self._value = clamp_delay(value)

    @property
    def value(self) -> int:
        return self._value

    def drag(self, raw: float) -> int:
        self._value = clamp_delay(raw)
        return self._value

    def __repr__(self) -> str:
        return f"DelayPicker(value={self._value})"
