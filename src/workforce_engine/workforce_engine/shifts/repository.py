from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ShiftAssignment, ShiftDefinition, ShiftDraft


class ShiftRepository(Protocol):
    def list_all(self) -> Sequence[ShiftDefinition]:
        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[ShiftDefinition]:
        raise NotImplementedError

    def create(self, draft: ShiftDraft) -> ShiftDefinition:
        raise NotImplementedError

    def update(self, shift_id: int, draft: ShiftDraft) -> bool:
        raise NotImplementedError

    def delete(self, shift_id: int) -> bool:
        raise NotImplementedError

    def find_for_employee(self, *, employee_id: int, on_date: date) -> Optional[ShiftDefinition]:
        """Shift of the first assignment (by effective_from) in force on ``on_date``."""

        raise NotImplementedError

    def upsert_assignment(
        self,
        *,
        shift_id: int,
        employee_id: int,
        effective_from: date,
        effective_to: Optional[date],
    ) -> ShiftAssignment:
        """Insert or update the single assignment keyed by (shift_id, employee_id)."""

        raise NotImplementedError

    def list_assignments(self, *, employee_id: int, start: date, end: date) -> Sequence[ShiftAssignment]:
        raise NotImplementedError

    def delete_assignment(self, assignment_id: int) -> bool:
        raise NotImplementedError

    def list_in_force(self, *, on_date: date) -> Sequence[ShiftAssignment]:
        """Every assignment in force on ``on_date``, by employee then effective_from."""

        raise NotImplementedError
