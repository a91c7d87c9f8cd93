from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...employees.model import Employee
from ...summaries.model import AttendanceSummary
from ..model import RecurringItem, SalaryComputation


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute(
        self,
        *,
        employee: Employee,
        attendance: AttendanceSummary,
        recurring_items: Sequence[RecurringItem],
    ) -> SalaryComputation:
        raise NotImplementedError
