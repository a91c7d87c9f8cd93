from __future__ import annotations

from datetime import date, datetime

from ...shifts.model import ShiftDefinition
from .base import ShiftWindow, ShiftWindowStrategy, next_day_if_before


class NightShiftStrategy(ShiftWindowStrategy):
    """Shift end rolls onto the next day when it is numerically before the start."""

    spans_midnight = True

    def window(self, shift: ShiftDefinition, log_date: date) -> ShiftWindow:
        start = datetime.combine(log_date, shift.start_time)
        return ShiftWindow(start=start, end=next_day_if_before(start, datetime.combine(log_date, shift.end_time)))
