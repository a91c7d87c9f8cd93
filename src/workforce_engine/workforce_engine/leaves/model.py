from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import LeavePayType, RequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    """An employee's leave request, read from the leave module."""

    request_id: int
    employee_id: int
    category: str
    pay_type: LeavePayType
    start_date: date
    end_date: date
    status: RequestStatus
    reason: Optional[str] = None
    approved_by: Optional[int] = None

    @property
    def is_unpaid(self) -> bool:
        return self.pay_type == LeavePayType.UNPAID

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "category": self.category,
            "pay_type": self.pay_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "status": self.status.value,
            "reason": self.reason,
        }
