"""Wall-clock time arithmetic shared by the attendance and time-log rules.

All values are same-day times of day at minute precision. Nothing here touches
storage; the only failure is a malformed ``HH:MM`` string.
"""

from __future__ import annotations

import re
from datetime import time, timedelta
from typing import Any, Optional, Union

from ..core.exceptions import RuleViolationError
from ..core.results import RuleCode

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

TimeLike = Union[time, str]


class InvalidTimeFormat(RuleViolationError):
    """Raised when a string is not a 24-hour ``HH:MM`` time."""

    def __init__(self, text: object):
        super().__init__(
            RuleCode.INVALID_FORMAT,
            f"Invalid time format: {text}. Expected HH:mm",
            details={"rule": RuleCode.INVALID_FORMAT.value, "value": str(text)},
        )


def parse_time(text: str) -> time:
    match = TIME_PATTERN.match(text) if isinstance(text, str) else None
    if not match:
        raise InvalidTimeFormat(text)
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def format_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def _as_time(value: TimeLike) -> time:
    return parse_time(value) if isinstance(value, str) else value


def minutes_of_day(value: TimeLike) -> int:
    t = _as_time(value)
    return t.hour * 60 + t.minute


def duration_minutes(start: TimeLike, end: TimeLike) -> int:
    """``end - start`` in minutes; zero or negative when end is not after start."""
    return minutes_of_day(end) - minutes_of_day(start)


def ranges_overlap(start_a: TimeLike, end_a: TimeLike, start_b: TimeLike, end_b: TimeLike) -> bool:
    """Half-open ``[start, end)`` intersection; touching endpoints do not overlap."""
    return minutes_of_day(start_a) < minutes_of_day(end_b) and minutes_of_day(start_b) < minutes_of_day(end_a)


def to_time_of_day(value: Any) -> Optional[time]:
    """Normalize a stored TIME value into ``datetime.time``.

    mysql-connector can return TIME as ``time``, ``timedelta`` or a string
    such as ``'08:30:00'``.
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        return time(hour=total_seconds // 3600, minute=(total_seconds % 3600) // 60)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(hour=int(parts[0]), minute=int(parts[1]))

    raise TypeError(f"Unsupported TIME value type: {type(value)!r}")
