from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import PaymentInfo, RecurringItem, SalaryComputation, SalarySlip


class SalarySlipRepository(Protocol):
    def get_by_id(self, slip_id: int) -> Optional[SalarySlip]:
        raise NotImplementedError

    def find_for_period(self, *, employee_id: int, salary_period: date) -> Optional[SalarySlip]:
        raise NotImplementedError

    def insert_if_absent(self, computation: SalaryComputation, *, generated_at: datetime) -> SalarySlip:
        """Insert a ``generated`` slip unless one exists for the period; return whichever row won."""

        raise NotImplementedError

    def replace_figures(self, slip_id: int, computation: SalaryComputation, *, generated_at: datetime) -> bool:
        """Overwrite the figures of a slip that is still ``generated``."""

        raise NotImplementedError

    def mark_paid(self, slip_ids: Iterable[int], payment: PaymentInfo, *, paid_at: datetime) -> int:
        """Move ``generated`` slips to ``paid``; returns how many transitioned."""

        raise NotImplementedError

    def list_for_period(self, *, salary_period: date, tenant_id: Optional[int] = None) -> Sequence[SalarySlip]:
        raise NotImplementedError

    def history(self, *, employee_id: int, limit: int) -> Sequence[SalarySlip]:
        """Most recent period first."""

        raise NotImplementedError


class RecurringItemRepository(Protocol):
    def list_active(self, employee_id: int) -> Sequence[RecurringItem]:
        raise NotImplementedError
