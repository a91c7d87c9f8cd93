from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..common.dates import minutes_between
from ..core.constants import MINUTES_PER_HOUR
from ..shifts.model import ShiftDefinition
from .strategies.base import ShiftWindow

_HOURS_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class SessionMetrics:
    total_hours: Decimal
    late_minutes: int = 0
    early_leave_minutes: int = 0
    overtime_minutes: int = 0


def worked_hours(worked_minutes: int, break_minutes: int) -> Decimal:
    net = max(0, int(worked_minutes) - int(break_minutes))
    return (Decimal(net) / MINUTES_PER_HOUR).quantize(_HOURS_PLACES, rounding=ROUND_HALF_UP)


def late_minutes(window: Optional[ShiftWindow], clocked_in_at: datetime) -> int:
    if window is None:
        return 0
    return minutes_between(window.start, clocked_in_at)


def session_metrics(
    *,
    started_at: datetime,
    ended_at: datetime,
    break_minutes: int,
    shift: Optional[ShiftDefinition],
    window: Optional[ShiftWindow],
) -> SessionMetrics:
    """Figures shared by the clock path and the manual path.

    Overtime counts from the shift end, unless the shift sets
    ``overtime_after_hours``: then only net worked time beyond that threshold is
    overtime.
    """

    worked = minutes_between(started_at, ended_at)
    total = worked_hours(worked, break_minutes)
    if shift is None or window is None:
        return SessionMetrics(total_hours=total)

    early = 0
    overtime = 0
    if ended_at < window.end:
        early = minutes_between(ended_at, window.end)
    elif ended_at > window.end:
        overtime = minutes_between(window.end, ended_at)
        if shift.overtime_after_hours > 0:
            threshold = shift.overtime_after_hours * MINUTES_PER_HOUR
            overtime = max(0, int((worked - break_minutes) - threshold))

    return SessionMetrics(
        total_hours=total,
        late_minutes=late_minutes(window, started_at),
        early_leave_minutes=early,
        overtime_minutes=overtime,
    )
