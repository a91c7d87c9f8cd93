from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from ..attendance.repository import AttendanceRepository
from ..calendars.model import WorkingDays
from ..calendars.service import CalendarService
from ..common.dates import clamp_range, iter_days, month_bounds
from ..core.enums import WorkLogStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..leaves.model import LeaveRequest
from ..leaves.repository import LeaveRepository
from ..shifts.service import ShiftService
from .model import AttendanceSummary

_PRESENT = frozenset({WorkLogStatus.PRESENT, WorkLogStatus.LATE})


def leave_working_dates(leaves: Iterable[LeaveRequest], calendar: WorkingDays) -> set[date]:
    """Working dates inside the given leaves, each leave clamped to the calendar's range.

    Overlapping leaves count a date once.
    """

    covered: set[date] = set()
    for leave in leaves:
        span = clamp_range(leave.start_date, leave.end_date, calendar.start, calendar.end)
        if span is None:
            continue
        covered.update(d for d in iter_days(*span) if calendar.is_working(d))
    return covered


class MonthlyAggregator:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        leaves: LeaveRepository,
        calendars: CalendarService,
        shifts: ShiftService,
    ):
        self._attendance = attendance
        self._employees = employees
        self._leaves = leaves
        self._calendars = calendars
        self._shifts = shifts

    def aggregate(self, *, employee_id: int, month: int, year: int) -> AttendanceSummary:
        try:
            start, end = month_bounds(month, year)
        except ValueError as e:
            raise ValidationError(str(e))
        mid_month = start.replace(day=15)
        return self.range_summary(employee_id=employee_id, start=start, end=end, shift_on=mid_month)

    def range_summary(self, *, employee_id: int, start: date, end: date, shift_on: date | None = None) -> AttendanceSummary:
        if start > end:
            raise ValidationError("start_date must be on or before end_date")
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")

        calendar = self._calendars.resolve_working_days(tenant_id=employee.tenant_id, start=start, end=end)
        records = tuple(
            log
            for log in self._attendance.list_for_employee(employee_id=employee.employee_id, start=start, end=end)
            if calendar.is_working(log.log_date)
        )
        logged_dates = {log.log_date for log in records}

        leaves = tuple(self._leaves.list_approved_overlapping(employee_id=employee.employee_id, start=start, end=end))
        leave_dates = leave_working_dates(leaves, calendar)
        unpaid_dates = leave_working_dates((lv for lv in leaves if lv.is_unpaid), calendar)

        return AttendanceSummary(
            employee_id=employee.employee_id,
            start=start,
            end=end,
            working_days=calendar.total_working_days,
            present_days=sum(1 for r in records if r.status in _PRESENT),
            absent_days=sum(1 for r in records if r.status == WorkLogStatus.ABSENT),
            half_days=sum(1 for r in records if r.status == WorkLogStatus.HALF_DAY),
            late_days=sum(1 for r in records if r.late_minutes > 0),
            leave_days=len(leave_dates),
            unpaid_leave_days=len(unpaid_dates),
            no_show_days=sum(1 for d in calendar.working_dates if d not in logged_dates and d not in leave_dates),
            total_hours=sum((r.total_hours or Decimal("0") for r in records), Decimal("0")),
            total_late_minutes=sum(r.late_minutes for r in records),
            total_overtime_minutes=sum(r.overtime_minutes for r in records),
            total_early_leave_minutes=sum(r.early_leave_minutes for r in records),
            total_break_minutes=sum(r.break_minutes for r in records),
            shift=self._shifts.resolve_shift(employee_id=employee.employee_id, on_date=shift_on or start),
            records=records,
            leaves=leaves,
        )
