from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import LeaveRequest


class LeaveRepository(Protocol):
    """Read-only access to approved leave."""

    def list_approved_overlapping(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        """Approved requests whose span intersects ``[start, end]``."""

        raise NotImplementedError

    def get_approved_covering(self, *, employee_id: int, on_date: date) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_approved_covering(self, *, on_date: date) -> Sequence[LeaveRequest]:
        raise NotImplementedError
