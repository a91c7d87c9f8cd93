from __future__ import annotations

from datetime import date, datetime

from ...shifts.model import ShiftDefinition
from .base import ShiftWindow, ShiftWindowStrategy


class DayShiftStrategy(ShiftWindowStrategy):
    """Start and end on the log date."""

    def window(self, shift: ShiftDefinition, log_date: date) -> ShiftWindow:
        return ShiftWindow(
            start=datetime.combine(log_date, shift.start_time),
            end=datetime.combine(log_date, shift.end_time),
        )
