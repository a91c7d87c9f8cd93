from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Sequence, Union

from ..common.validators import require_non_empty, require_non_negative, require_ordered
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import ShiftAssignment, ShiftDefinition, ShiftDraft
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


def _hours(value) -> Decimal:
    try:
        hours = Decimal(str(value if value is not None else 0))
    except InvalidOperation:
        raise ValidationError("overtime_after_hours must be a number")
    if hours < 0:
        raise ValidationError("overtime_after_hours must not be negative")
    return hours


def build_draft(
    *,
    shift_name: str,
    start_time: time,
    end_time: time,
    overtime_after_hours=0,
    is_night_shift: bool = False,
    break_minutes: int = 0,
) -> ShiftDraft:
    if start_time is None or end_time is None:
        raise ValidationError("start_time and end_time are required")
    return ShiftDraft(
        shift_name=require_non_empty(shift_name, "shift_name"),
        start_time=start_time,
        end_time=end_time,
        overtime_after_hours=_hours(overtime_after_hours),
        # An end before the start can only mean the shift runs past midnight.
        is_night_shift=bool(is_night_shift) or end_time < start_time,
        break_minutes=require_non_negative(break_minutes, "break_minutes"),
    )


class ShiftService:
    def __init__(self, shifts: ShiftRepository, employees: EmployeeRepository):
        self._shifts = shifts
        self._employees = employees

    def resolve_shift(self, *, employee_id: int, on_date: date) -> Optional[ShiftDefinition]:
        return self._shifts.find_for_employee(employee_id=int(employee_id), on_date=on_date)

    def assign(
        self,
        *,
        shift_id: int,
        employee_ids: Union[int, Iterable[int]],
        effective_from: date,
        effective_to: Optional[date] = None,
    ) -> list[ShiftAssignment]:
        require_ordered(effective_from, effective_to, start_name="effective_from", end_name="effective_to")
        shift = self.get_shift(shift_id)

        ids = [int(employee_ids)] if isinstance(employee_ids, int) else [int(i) for i in employee_ids]
        if not ids:
            raise ValidationError("At least one employee is required")
        for employee_id in ids:
            if not self._employees.get_by_id(employee_id):
                raise NotFoundError(f"Employee {employee_id} not found")

        assignments = [
            self._shifts.upsert_assignment(
                shift_id=shift.shift_id,
                employee_id=employee_id,
                effective_from=effective_from,
                effective_to=effective_to,
            )
            for employee_id in ids
        ]
        logger.info("Shift %s assigned to employees %s from %s", shift.shift_id, ids, effective_from)
        return assignments

    def schedule_for(self, *, employee_id: int, start: date, end: date) -> Sequence[ShiftAssignment]:
        if start > end:
            raise ValidationError("start_date must be on or before end_date")
        return self._shifts.list_assignments(employee_id=int(employee_id), start=start, end=end)

    def roster(self, *, on_date: date, tenant_id: Optional[int] = None) -> Sequence[ShiftAssignment]:
        assignments = self._shifts.list_in_force(on_date=on_date)
        if tenant_id is None:
            return assignments
        allowed = {e.employee_id for e in self._employees.list_active(tenant_id=tenant_id)}
        return [a for a in assignments if a.employee_id in allowed]

    def delete_assignment(self, assignment_id: int) -> None:
        if not self._shifts.delete_assignment(int(assignment_id)):
            raise NotFoundError("Shift assignment not found")
        logger.info("Shift assignment %s deleted", assignment_id)

    def list_shifts(self) -> Sequence[ShiftDefinition]:
        return self._shifts.list_all()

    def get_shift(self, shift_id: int) -> ShiftDefinition:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    def create_shift(self, **fields) -> ShiftDefinition:
        shift = self._shifts.create(build_draft(**fields))
        logger.info("Shift %s (%s) created", shift.shift_id, shift.shift_name)
        return shift

    def update_shift(self, shift_id: int, **changes) -> ShiftDefinition:
        current = self.get_shift(shift_id)
        merged = {
            "shift_name": current.shift_name,
            "start_time": current.start_time,
            "end_time": current.end_time,
            "overtime_after_hours": current.overtime_after_hours,
            "is_night_shift": current.is_night_shift,
            "break_minutes": current.break_minutes,
        }
        merged.update({k: v for k, v in changes.items() if v is not None})
        if changes.get("is_night_shift") is None and (changes.get("start_time") or changes.get("end_time")):
            # Moving the window re-derives the night flag from the new times.
            merged["is_night_shift"] = False

        draft = build_draft(**merged)
        if not self._shifts.update(current.shift_id, draft):
            raise NotFoundError("Shift not found")
        return ShiftDefinition(shift_id=current.shift_id, **asdict(draft))

    def delete_shift(self, shift_id: int) -> None:
        if not self._shifts.delete(int(shift_id)):
            raise NotFoundError("Shift not found")
        logger.info("Shift %s deleted", shift_id)
