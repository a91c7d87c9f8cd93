from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from mysql.connector import Error as MySQLError

from ..common.clock import TenantClock
from ..common.outcome import BulkOutcome
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import SlipStatus
from ..core.exceptions import BusinessRuleViolation, DomainError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..summaries.service import MonthlyAggregator
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import PaymentInfo, PayrollSummary, SalaryComputation, SalarySlip, money
from .repository import RecurringItemRepository, SalarySlipRepository

logger = logging.getLogger(__name__)


def salary_period(month: int, year: int) -> date:
    try:
        return date(int(year), int(month), 1)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid salary period: {month!r}/{year!r}")


class PayrollService:
    def __init__(
        self,
        slips: SalarySlipRepository,
        recurring_items: RecurringItemRepository,
        employees: EmployeeRepository,
        aggregator: MonthlyAggregator,
        *,
        clock: Optional[TenantClock] = None,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._slips = slips
        self._recurring = recurring_items
        self._employees = employees
        self._aggregator = aggregator
        self._clock = clock or TenantClock()
        self._calculator = calculator or StandardPayrollCalculator()

    def preview_salary(self, *, employee_id: int, month: int, year: int) -> SalaryComputation:
        employee = self._require_employee(employee_id)
        return self._compute(employee, salary_period(month, year))

    def generate_salary_slip(self, *, employee_id: int, month: int, year: int) -> SalarySlip:
        """Get-or-create: an existing slip for the period is returned unchanged."""

        period = salary_period(month, year)
        existing = self._slips.find_for_period(employee_id=int(employee_id), salary_period=period)
        if existing:
            return existing

        employee = self._require_employee(employee_id)
        computation = self._compute(employee, period)
        slip = self._slips.insert_if_absent(computation, generated_at=self._clock.now(employee.tenant_id))
        logger.info(
            "Salary slip %s generated for employee %s, period %s (net %s, LOP %s days)",
            slip.slip_id, employee.employee_id, period, slip.net_payable, computation.lop_days,
        )
        return slip

    def recompute_salary_slip(self, *, employee_id: int, month: int, year: int) -> SalarySlip:
        """Rebuild a ``generated`` slip from current attendance, leave and pay items."""

        period = salary_period(month, year)
        existing = self._slips.find_for_period(employee_id=int(employee_id), salary_period=period)
        if not existing:
            raise NotFoundError("Salary slip not found")
        if existing.status != SlipStatus.GENERATED:
            raise BusinessRuleViolation("Only generated salary slips can be recomputed")

        employee = self._require_employee(employee_id)
        computation = self._compute(employee, period)
        if not self._slips.replace_figures(
            existing.slip_id, computation, generated_at=self._clock.now(employee.tenant_id)
        ):
            raise BusinessRuleViolation("Only generated salary slips can be recomputed")

        logger.info("Salary slip %s recomputed (net %s)", existing.slip_id, computation.net_payable)
        return self.get_salary_slip(existing.slip_id)

    def bulk_generate_salary_slips(
        self,
        *,
        month: int,
        year: int,
        employee_ids: Optional[Iterable[int]] = None,
        tenant_id: Optional[int] = None,
    ) -> BulkOutcome[SalarySlip]:
        salary_period(month, year)
        employees = self._employees.list_active(tenant_id=tenant_id, employee_ids=employee_ids)

        outcome: BulkOutcome[SalarySlip] = BulkOutcome()
        for employee in employees:
            try:
                outcome.items.append(
                    self.generate_salary_slip(employee_id=employee.employee_id, month=month, year=year)
                )
            except DomainError as e:
                logger.warning("Salary slip for employee %s not generated: %s", employee.employee_id, e)
                outcome.fail(employee.employee_id, str(e))
            except MySQLError as e:
                logger.error("Database error generating salary slip for employee %s: %s", employee.employee_id, e)
                outcome.fail(employee.employee_id, str(e))

        logger.info("Bulk payroll %s/%s: %s slips, %s failures", month, year, outcome.count, len(outcome.errors))
        return outcome

    def mark_as_paid(self, slip_id: int, payment: PaymentInfo = PaymentInfo()) -> SalarySlip:
        slip = self.get_salary_slip(slip_id)
        if slip.status != SlipStatus.GENERATED:
            raise BusinessRuleViolation(f"Salary slip is already {slip.status.value}")

        paid_at = self._clock.now(self._tenant_of(slip.employee_id))
        if not self._slips.mark_paid([slip.slip_id], payment, paid_at=paid_at):
            raise BusinessRuleViolation("Salary slip was paid concurrently")

        logger.info("Salary slip %s marked as paid (%s)", slip.slip_id, payment.method or "unspecified")
        return self.get_salary_slip(slip.slip_id)

    def bulk_mark_as_paid(self, slip_ids: Iterable[int], payment: PaymentInfo = PaymentInfo()) -> int:
        """Slips that are not ``generated`` are left alone; returns how many were paid."""

        ids = sorted({int(i) for i in slip_ids})
        if not ids:
            return 0
        count = self._slips.mark_paid(ids, payment, paid_at=self._clock.now(None))
        logger.info("Marked %s of %s salary slips as paid", count, len(ids))
        return count

    def get_salary_slip(self, slip_id: int) -> SalarySlip:
        slip = self._slips.get_by_id(int(slip_id))
        if not slip:
            raise NotFoundError("Salary slip not found")
        return slip

    def salary_history(self, *, employee_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[SalarySlip]:
        if int(limit) <= 0:
            raise ValidationError("limit must be positive")
        return self._slips.history(employee_id=int(employee_id), limit=int(limit))

    def monthly_summary(self, *, month: int, year: int, tenant_id: Optional[int] = None) -> PayrollSummary:
        slips = tuple(self._slips.list_for_period(salary_period=salary_period(month, year), tenant_id=tenant_id))
        zero = Decimal("0")
        return PayrollSummary(
            month=int(month),
            year=int(year),
            total_employees=len(slips),
            total_earnings=money(sum((s.total_earnings for s in slips), zero)),
            total_deductions=money(sum((s.total_deductions for s in slips), zero)),
            total_net_payable=money(sum((s.net_payable for s in slips), zero)),
            paid_count=sum(1 for s in slips if s.status == SlipStatus.PAID),
            pending_count=sum(1 for s in slips if s.status == SlipStatus.GENERATED),
            slips=slips,
        )

    def _compute(self, employee: Employee, period: date) -> SalaryComputation:
        attendance = self._aggregator.aggregate(employee_id=employee.employee_id, month=period.month, year=period.year)
        return self._calculator.compute(
            employee=employee,
            attendance=attendance,
            recurring_items=self._recurring.list_active(employee.employee_id),
        )

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _tenant_of(self, employee_id: int) -> Optional[int]:
        employee = self._employees.get_by_id(int(employee_id))
        return employee.tenant_id if employee else None
