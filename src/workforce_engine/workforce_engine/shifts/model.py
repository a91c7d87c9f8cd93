from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class ShiftDefinition:
    """A named working window. A night shift's end falls on the following day."""

    shift_id: int
    shift_name: str
    start_time: time
    end_time: time
    overtime_after_hours: Decimal = Decimal("0")
    is_night_shift: bool = False
    break_minutes: int = 0

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time < self.start_time

    def to_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "shift_name": self.shift_name,
            "start_time": self.start_time.strftime("%H:%M:%S"),
            "end_time": self.end_time.strftime("%H:%M:%S"),
            "overtime_after_hours": str(self.overtime_after_hours),
            "is_night_shift": self.is_night_shift,
            "break_minutes": self.break_minutes,
        }


@dataclass(frozen=True)
class ShiftDraft:
    shift_name: str
    start_time: time
    end_time: time
    overtime_after_hours: Decimal = Decimal("0")
    is_night_shift: bool = False
    break_minutes: int = 0


@dataclass(frozen=True)
class ShiftAssignment:
    assignment_id: int
    shift_id: int
    employee_id: int
    effective_from: date
    effective_to: Optional[date] = None
    shift_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.assignment_id,
            "shift_id": self.shift_id,
            "shift_name": self.shift_name,
            "employee_id": self.employee_id,
            "effective_from": self.effective_from.isoformat(),
            "effective_to": self.effective_to.isoformat() if self.effective_to else None,
        }
