from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock_time(value) -> Optional[time]:
    """Accept ``time`` or ``"HH:MM"`` / ``"HH:MM:SS"`` strings."""

    if value is None or isinstance(value, time):
        return value
    v = str(value).strip()
    if not v:
        return None
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time value: {value!r}")


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bounds(month: int, year: int) -> tuple[date, date]:
    if not 1 <= int(month) <= 12:
        raise ValueError(f"Invalid month: {month!r}")
    last = calendar.monthrange(int(year), int(month))[1]
    return date(int(year), int(month), 1), date(int(year), int(month), last)


def clamp_range(start: date, end: date, lower: date, upper: date) -> Optional[tuple[date, date]]:
    """Intersect ``[start, end]`` with ``[lower, upper]``; None when disjoint."""

    s = max(start, lower)
    e = min(end, upper)
    if s > e:
        return None
    return s, e


def ranges_overlap(
    a_from: Optional[date],
    a_to: Optional[date],
    b_from: Optional[date],
    b_to: Optional[date],
) -> bool:
    """Closed-interval overlap where a missing bound is unbounded.

    ``None`` as a start means the infinite past, ``None`` as an end the infinite
    future. Symmetric in its two ranges.
    """

    starts_before_b_ends = a_from is None or b_to is None or a_from <= b_to
    b_starts_before_a_ends = b_from is None or a_to is None or b_from <= a_to
    return starts_before_b_ends and b_starts_before_a_ends


def minutes_between(earlier: datetime, later: datetime) -> int:
    """Whole minutes elapsed from ``earlier`` to ``later`` (0 when not after)."""

    if later <= earlier:
        return 0
    return int((later - earlier).total_seconds() // 60)
