"""
Configuration types for the rate limiting system.
"""

import re
from dataclasses import dataclass
from datetime import timedelta

_WINDOW_PATTERN = re.compile(r"^(\d+)([smhd]|min|sec|hour|day)$")

_UNIT_SECONDS = {
    "s": 1,
    "sec": 1,
    "m": 60,
    "min": 60,
    "h": 3600,
    "hour": 3600,
    "d": 86400,
    "day": 86400,
}


class TimeWindow:
    """Time window for rate limits."""

    def __init__(self, value: "str | int | timedelta | TimeWindow") -> None:
        if isinstance(value, TimeWindow):
            self.seconds = value.seconds
        elif isinstance(value, str):
            self._parse_string(value)
        elif isinstance(value, bool):
            raise ValueError(f"Invalid time window value: {value}")
        elif isinstance(value, int):
            self.seconds = value
        elif isinstance(value, timedelta):
            self.seconds = int(value.total_seconds())
        else:
            raise ValueError(f"Invalid time window value: {value}")

    def _parse_string(self, value: str) -> None:
        """Parse string time window (e.g., '1min', '5s', '1h')."""
        value = value.lower().strip()

        match = _WINDOW_PATTERN.match(value)
        if not match:
            raise ValueError(f"Invalid time window format: {value}")

        number, unit = match.groups()
        self.seconds = int(number) * _UNIT_SECONDS[unit]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TimeWindow) and other.seconds == self.seconds

    def __hash__(self) -> int:
        return hash(self.seconds)

    def __str__(self) -> str:
        if self.seconds < 60:
            return f"{self.seconds}s"
        elif self.seconds < 3600:
            return f"{self.seconds // 60}min"
        elif self.seconds < 86400:
            return f"{self.seconds // 3600}h"
        else:
            return f"{self.seconds // 86400}d"

    def __repr__(self) -> str:
        return f"TimeWindow({self.seconds}s)"


@dataclass
class RateLimitRule:
    """Configuration for a single rate limit rule."""

    limit: int  # Number of attempts allowed per window
    window: TimeWindow
    identifier: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.window, TimeWindow):
            self.window = TimeWindow(self.window)
