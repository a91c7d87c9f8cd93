from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..attendance.model import WorkLog
from ..leaves.model import LeaveRequest
from ..shifts.model import ShiftDefinition


@dataclass(frozen=True)
class AttendanceSummary:
    """Attendance of one employee over a date range, counted on working dates only."""

    employee_id: int
    start: date
    end: date
    working_days: int
    present_days: int
    absent_days: int
    half_days: int
    late_days: int
    leave_days: int
    unpaid_leave_days: int
    no_show_days: int
    total_hours: Decimal
    total_late_minutes: int
    total_overtime_minutes: int
    total_early_leave_minutes: int
    total_break_minutes: int
    shift: Optional[ShiftDefinition] = None
    records: tuple[WorkLog, ...] = field(default_factory=tuple)
    leaves: tuple[LeaveRequest, ...] = field(default_factory=tuple)

    @property
    def month(self) -> int:
        return self.start.month

    @property
    def year(self) -> int:
        return self.start.year

    def to_dict(self, *, include_records: bool = True) -> dict:
        out = {
            "employee_id": self.employee_id,
            "start_date": self.start.isoformat(),
            "end_date": self.end.isoformat(),
            "month": self.month,
            "year": self.year,
            "working_days": self.working_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "half_days": self.half_days,
            "late_days": self.late_days,
            "leave_days": self.leave_days,
            "unpaid_leave_days": self.unpaid_leave_days,
            "no_show_days": self.no_show_days,
            "total_hours": str(self.total_hours),
            "total_late_minutes": self.total_late_minutes,
            "total_overtime_minutes": self.total_overtime_minutes,
            "total_early_leave_minutes": self.total_early_leave_minutes,
            "total_break_minutes": self.total_break_minutes,
            "shift": self.shift.to_dict() if self.shift else None,
        }
        if include_records:
            out["records"] = [r.to_dict() for r in self.records]
            out["leaves"] = [lv.to_dict() for lv in self.leaves]
        return out
