from __future__ import annotations

from datetime import date
from typing import ContextManager, Iterable, Optional, Protocol, Sequence

from .model import WorkLog


class WorkLogScope(Protocol):
    """The (employee, day) row locked for one read-modify-write transaction."""

    record: Optional[WorkLog]

    def save(self, log: WorkLog) -> WorkLog:
        """Insert when ``log.log_id`` is None, else update. Raises ConcurrentWriteError on a lost race."""

        raise NotImplementedError


class AttendanceRepository(Protocol):
    def get_by_id(self, log_id: int) -> Optional[WorkLog]:
        raise NotImplementedError

    def get_for_day(self, *, employee_id: int, log_date: date) -> Optional[WorkLog]:
        raise NotImplementedError

    def locked_day(self, *, employee_id: int, log_date: date) -> ContextManager[WorkLogScope]:
        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Sequence[WorkLog]:
        """Ordered by log_date."""

        raise NotImplementedError

    def list_for_date(self, *, on_date: date, employee_ids: Optional[Iterable[int]] = None) -> Sequence[WorkLog]:
        raise NotImplementedError

    def delete(self, log_id: int) -> bool:
        raise NotImplementedError
