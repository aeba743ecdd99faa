"""Clock-time helpers for booking windows expressed as "HH:MM" strings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import math
import re
from typing import Optional

_CLOCK_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

MINUTES_PER_DAY = 24 * 60


def parse_clock(value: str) -> int:
    """Minutes since midnight for an ``HH:MM`` string."""
    match = _CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"invalid time {value!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def normalize_clock(value: str) -> str:
    minutes = parse_clock(value)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def hours_between(start: str, end: str) -> float:
    """Duration of a window; an end before the start wraps past midnight."""
    delta = parse_clock(end) - parse_clock(start)
    if delta < 0:
        delta += MINUTES_PER_DAY
    return max(delta, 0) / 60.0


def inclusive_day_count(start: date, end: date) -> int:
    """Calendar days covered by ``[start, end]``, counting both endpoints."""
    return int(math.ceil(abs((end - start).days))) + 1


@dataclass(frozen=True)
class TimeWindow:
    """Half-open ``[start, end)`` window in minutes since midnight."""

    start: int
    end: int

    @classmethod
    def from_clock(cls, start: Optional[str], end: Optional[str]) -> Optional["TimeWindow"]:
        if not start or not end:
            return None
        return cls(parse_clock(start), parse_clock(end))

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and self.end > other.start

    def within(self, other: "TimeWindow") -> bool:
        return other.start <= self.start and self.end <= other.end
