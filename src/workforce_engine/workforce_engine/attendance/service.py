from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..calendars.service import CalendarService
from ..common.clock import TenantClock
from ..common.dates import parse_clock_time, parse_iso_date
from ..common.outcome import BulkOutcome
from ..common.validators import require_non_negative
from ..core.constants import AUTO_ABSENT_NOTE, SYSTEM_AUTHOR_ID
from ..core.enums import SessionState, WorkLogStatus
from ..core.exceptions import (
    AlreadyClockedInError,
    ConcurrentWriteError,
    DomainError,
    NoActiveClockInError,
    NotFoundError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leaves.repository import LeaveRepository
from ..shifts.model import ShiftDefinition
from ..shifts.service import ShiftService
from .factory import ShiftWindowStrategyFactory
from .metrics import late_minutes, session_metrics
from .model import ClockContext, CurrentStatus, WorkLog
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_MINUTE_FIELDS = ("late_minutes", "early_leave_minutes", "overtime_minutes", "break_minutes")
_MANUAL_FIELDS = frozenset({"status", "clock_in", "clock_out", "total_hours", "notes", "author_id", *_MINUTE_FIELDS})
_ATTENDED = frozenset({WorkLogStatus.PRESENT, WorkLogStatus.LATE, WorkLogStatus.HALF_DAY})
_KEEP_ON_AUTO_ABSENT = _ATTENDED | {WorkLogStatus.ON_LEAVE, WorkLogStatus.HOLIDAY}


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        leaves: LeaveRepository,
        shifts: ShiftService,
        calendars: CalendarService,
        *,
        clock: Optional[TenantClock] = None,
        strategy_factory: Optional[ShiftWindowStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._leaves = leaves
        self._shifts = shifts
        self._calendars = calendars
        self._clock = clock or TenantClock()
        self._factory = strategy_factory or ShiftWindowStrategyFactory()

    # Clock path

    def clock_in(self, *, employee_id: int, context: ClockContext = ClockContext()) -> CurrentStatus:
        employee = self._require_employee(employee_id)
        now = self._clock.now(employee.tenant_id).replace(microsecond=0)
        today = now.date()

        shift = self._shifts.resolve_shift(employee_id=employee.employee_id, on_date=today)
        window = self._factory.for_shift(shift).window(shift, today) if shift else None
        late = late_minutes(window, now)

        # A night session from yesterday is still running until clock-out.
        if self._open_night_session(employee.employee_id, today - timedelta(days=1)):
            raise AlreadyClockedInError()

        try:
            with self._attendance.locked_day(employee_id=employee.employee_id, log_date=today) as day:
                current = day.record
                if current and current.is_open:
                    raise AlreadyClockedInError()

                base = current or WorkLog(
                    log_id=None,
                    employee_id=employee.employee_id,
                    log_date=today,
                    break_minutes=shift.break_minutes if shift else 0,
                )
                # Re-entry reopens the same row and clears the previous clock-out.
                day.save(
                    replace(
                        base,
                        status=WorkLogStatus.PRESENT,
                        clock_in=now.time(),
                        clock_out=None,
                        total_hours=None,
                        late_minutes=late,
                        early_leave_minutes=0,
                        overtime_minutes=0,
                        clock_in_ip=context.ip_address,
                        clock_in_location=context.location,
                        clock_out_ip=None,
                        clock_out_location=None,
                        tenant_id=employee.tenant_id,
                        author_id=context.author_id,
                    )
                )
        except ConcurrentWriteError:
            raise AlreadyClockedInError()

        logger.info("Employee %s clocked in at %s (late %s min)", employee.employee_id, now, late)
        return self.get_current_status(employee_id=employee.employee_id)

    def clock_out(self, *, employee_id: int, context: ClockContext = ClockContext()) -> CurrentStatus:
        employee = self._require_employee(employee_id)
        now = self._clock.now(employee.tenant_id).replace(microsecond=0)
        today = now.date()

        closed = self._close_session(employee, log_date=today, now=now, context=context, night_only=False)
        if closed is None:
            closed = self._close_session(
                employee, log_date=today - timedelta(days=1), now=now, context=context, night_only=True
            )
        if closed is None:
            raise NoActiveClockInError()

        logger.info(
            "Employee %s clocked out at %s (%s h, overtime %s min)",
            employee.employee_id, now, closed.total_hours, closed.overtime_minutes,
        )
        return self.get_current_status(employee_id=employee.employee_id)

    def get_current_status(self, *, employee_id: int) -> CurrentStatus:
        employee = self._require_employee(employee_id)
        now = self._clock.now(employee.tenant_id).replace(microsecond=0)
        today = now.date()
        zone = self._clock.zone_for(employee.tenant_id).key

        leave = self._leaves.get_approved_covering(employee_id=employee.employee_id, on_date=today)
        if leave:
            return CurrentStatus(state=SessionState.ON_LEAVE, current_time=now, timezone=zone, leave=leave)

        shift = self._shifts.resolve_shift(employee_id=employee.employee_id, on_date=today)
        log = self._attendance.get_for_day(employee_id=employee.employee_id, log_date=today)
        if log is None or log.clock_in is None:
            overnight = self._open_night_session(employee.employee_id, today - timedelta(days=1))
            if overnight:
                log, shift = overnight

        if log is None or log.clock_in is None:
            state = SessionState.NOT_CLOCKED_IN
        elif log.is_open:
            state = SessionState.CLOCKED_IN
        else:
            state = SessionState.CLOCKED_OUT
        return CurrentStatus(state=state, current_time=now, timezone=zone, log=log, shift=shift)

    # Manual path

    def record_attendance(self, *, employee_id: int, log_date: date, fields: Mapping[str, Any]) -> WorkLog:
        """Create or update the employee's log for ``log_date``.

        Fields left out keep their stored values. When both clock times are
        known after merging, the derived figures are recomputed from them.
        """

        employee = self._require_employee(employee_id)
        changes = self._parse_manual_fields(fields)

        with self._attendance.locked_day(employee_id=employee.employee_id, log_date=log_date) as day:
            base = day.record or WorkLog(
                log_id=None,
                employee_id=employee.employee_id,
                log_date=log_date,
                tenant_id=employee.tenant_id,
            )
            merged = replace(base, **changes)

            if merged.clock_in is not None and merged.clock_out is not None:
                shift = self._shifts.resolve_shift(employee_id=employee.employee_id, on_date=log_date)
                strategy = self._factory.for_shift(shift)
                metrics = session_metrics(
                    started_at=datetime.combine(log_date, merged.clock_in),
                    ended_at=strategy.clock_out_at(log_date, merged.clock_in, merged.clock_out),
                    break_minutes=merged.break_minutes,
                    shift=shift,
                    window=strategy.window(shift, log_date) if shift else None,
                )
                merged = replace(
                    merged,
                    total_hours=metrics.total_hours,
                    late_minutes=metrics.late_minutes,
                    early_leave_minutes=metrics.early_leave_minutes,
                    overtime_minutes=metrics.overtime_minutes,
                )
            elif {"clock_in", "clock_out"} & changes.keys():
                # An incomplete session carries no derived figures.
                cleared = {"total_hours": None, "early_leave_minutes": 0, "overtime_minutes": 0}
                if merged.clock_in is None:
                    cleared["late_minutes"] = 0
                merged = replace(merged, **{k: v for k, v in cleared.items() if k not in changes})
            saved = day.save(merged)

        logger.info("Attendance recorded for employee %s on %s (%s)", employee.employee_id, log_date, saved.status.value)
        return saved

    def bulk_record_attendance(self, records: Iterable[Mapping[str, Any]]) -> BulkOutcome[WorkLog]:
        outcome: BulkOutcome[WorkLog] = BulkOutcome()
        for index, record in enumerate(records):
            key = {"index": index, "employee_id": record.get("employee_id"), "log_date": record.get("log_date")}
            try:
                employee_id = int(record["employee_id"])
                log_date = record["log_date"]
                if not isinstance(log_date, date):
                    log_date = parse_iso_date(str(log_date))
            except (KeyError, TypeError, ValueError):
                outcome.fail(key, "employee_id and log_date (YYYY-MM-DD) are required")
                continue

            fields = {k: v for k, v in record.items() if k not in ("employee_id", "log_date")}
            try:
                outcome.items.append(self.record_attendance(employee_id=employee_id, log_date=log_date, fields=fields))
            except DomainError as e:
                logger.warning("Bulk attendance entry %s skipped: %s", key, e)
                outcome.fail(key, str(e))
        return outcome

    def delete_work_log(self, log_id: int) -> None:
        if not self._attendance.delete(int(log_id)):
            raise NotFoundError("Work log not found")
        logger.info("Work log %s deleted", log_id)

    def list_work_logs(self, *, employee_id: int, start: date, end: date) -> Sequence[WorkLog]:
        if start > end:
            raise ValidationError("start_date must be on or before end_date")
        return self._attendance.list_for_employee(employee_id=int(employee_id), start=start, end=end)

    # Daily sync

    def sync_with_approved_leaves(self, *, on_date: date, tenant_id: Optional[int] = None) -> int:
        """Mark every employee on approved leave for ``on_date`` as on_leave."""

        leaves = self._leaves.list_approved_covering(on_date=on_date)
        if tenant_id is not None:
            allowed = {e.employee_id for e in self._employees.list_active(tenant_id=tenant_id)}
            leaves = [lv for lv in leaves if lv.employee_id in allowed]

        synced = 0
        for leave in leaves:
            employee = self._employees.get_by_id(leave.employee_id)
            note = f"On approved leave: {leave.category}" + (f" - {leave.reason}" if leave.reason else "")
            with self._attendance.locked_day(employee_id=leave.employee_id, log_date=on_date) as day:
                base = day.record or WorkLog(
                    log_id=None,
                    employee_id=leave.employee_id,
                    log_date=on_date,
                    tenant_id=employee.tenant_id if employee else None,
                )
                day.save(replace(base, status=WorkLogStatus.ON_LEAVE, notes=note, author_id=leave.approved_by))
            synced += 1

        logger.info("Synced %s approved leaves into work logs for %s", synced, on_date)
        return synced

    def auto_mark_absent(self, *, on_date: date, tenant_id: Optional[int] = None) -> int:
        """Mark active employees with no attendance on a working day as absent."""

        employees = self._employees.list_active(tenant_id=tenant_id)
        logged = {
            log.employee_id: log
            for log in self._attendance.list_for_date(on_date=on_date, employee_ids=[e.employee_id for e in employees])
        }

        working: dict[int, bool] = {}
        marked = 0
        for employee in employees:
            if employee.tenant_id not in working:
                working[employee.tenant_id] = self._calendars.is_working_day(tenant_id=employee.tenant_id, on_date=on_date)
            if not working[employee.tenant_id]:
                continue

            existing = logged.get(employee.employee_id)
            if existing and existing.status in _KEEP_ON_AUTO_ABSENT:
                continue
            if self._leaves.get_approved_covering(employee_id=employee.employee_id, on_date=on_date):
                continue

            with self._attendance.locked_day(employee_id=employee.employee_id, log_date=on_date) as day:
                if day.record and day.record.status in _KEEP_ON_AUTO_ABSENT:
                    continue
                base = day.record or WorkLog(
                    log_id=None,
                    employee_id=employee.employee_id,
                    log_date=on_date,
                    tenant_id=employee.tenant_id,
                )
                day.save(replace(base, status=WorkLogStatus.ABSENT, notes=AUTO_ABSENT_NOTE, author_id=SYSTEM_AUTHOR_ID))
            marked += 1

        logger.info("Auto-marked %s employees absent for %s", marked, on_date)
        return marked

    # Helpers

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _open_night_session(self, employee_id: int, log_date: date) -> Optional[tuple[WorkLog, ShiftDefinition]]:
        log = self._attendance.get_for_day(employee_id=employee_id, log_date=log_date)
        if not log or not log.is_open:
            return None
        shift = self._shifts.resolve_shift(employee_id=employee_id, on_date=log_date)
        if not shift or not self._factory.for_shift(shift).spans_midnight:
            return None
        return log, shift

    def _close_session(
        self,
        employee: Employee,
        *,
        log_date: date,
        now: datetime,
        context: ClockContext,
        night_only: bool,
    ) -> Optional[WorkLog]:
        shift = self._shifts.resolve_shift(employee_id=employee.employee_id, on_date=log_date)
        strategy = self._factory.for_shift(shift)
        if night_only and not (shift and strategy.spans_midnight):
            return None

        with self._attendance.locked_day(employee_id=employee.employee_id, log_date=log_date) as day:
            log = day.record
            if not log or not log.is_open:
                return None

            metrics = session_metrics(
                started_at=log.clock_in_at(),
                ended_at=now,
                break_minutes=log.break_minutes,
                shift=shift,
                window=strategy.window(shift, log_date) if shift else None,
            )
            return day.save(
                replace(
                    log,
                    clock_out=now.time(),
                    clock_out_ip=context.ip_address,
                    clock_out_location=context.location,
                    total_hours=metrics.total_hours,
                    early_leave_minutes=metrics.early_leave_minutes,
                    overtime_minutes=metrics.overtime_minutes,
                    author_id=context.author_id if context.author_id is not None else log.author_id,
                )
            )

    def _parse_manual_fields(self, fields: Mapping[str, Any]) -> dict:
        unknown = set(fields) - _MANUAL_FIELDS
        if unknown:
            raise ValidationError(f"Unknown attendance fields: {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = {}

        if "status" in fields and fields["status"] is not None:
            try:
                changes["status"] = WorkLogStatus(str(fields["status"]))
            except ValueError:
                raise ValidationError(f"Invalid status: {fields['status']!r}")

        for key in ("clock_in", "clock_out"):
            if key in fields:
                try:
                    changes[key] = parse_clock_time(fields[key])
                except ValueError:
                    raise ValidationError(f"{key} must be HH:MM or HH:MM:SS")

        for key in _MINUTE_FIELDS:
            if key in fields and fields[key] is not None:
                changes[key] = require_non_negative(fields[key], key)

        if "total_hours" in fields:
            raw = fields["total_hours"]
            try:
                changes["total_hours"] = Decimal(str(raw)) if raw is not None else None
            except InvalidOperation:
                raise ValidationError("total_hours must be a number")
            if changes["total_hours"] is not None and changes["total_hours"] < 0:
                raise ValidationError("total_hours must not be negative")

        if "notes" in fields:
            changes["notes"] = fields["notes"]
        if "author_id" in fields and fields["author_id"] is not None:
            changes["author_id"] = require_non_negative(fields["author_id"], "author_id")
        return changes
