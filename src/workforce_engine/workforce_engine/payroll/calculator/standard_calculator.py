from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from ...core.constants import HALF_DAY_WEIGHT
from ...core.enums import LineItemKind
from ...employees.model import Employee
from ...summaries.model import AttendanceSummary
from ..model import LineItem, RecurringItem, SalaryComputation, format_days, money
from .base import PayrollCalculator

ZERO = Decimal("0")


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: base pay plus benefits, minus deductions and loss of pay.

    Loss of pay is measured in working days: every absence (marked or no-show)
    and every unpaid leave day counts fully, half-days count half. A day costs
    ``base_salary / working_days``.
    """

    def compute(
        self,
        *,
        employee: Employee,
        attendance: AttendanceSummary,
        recurring_items: Sequence[RecurringItem],
    ) -> SalaryComputation:
        base = money(employee.base_salary)
        working_days = attendance.working_days

        lop_days = (
            Decimal(attendance.absent_days + attendance.no_show_days)
            + Decimal(HALF_DAY_WEIGHT) * attendance.half_days
            + Decimal(attendance.unpaid_leave_days)
        )
        per_day = base / working_days if working_days > 0 else ZERO
        lop_amount = money(lop_days * per_day)

        earnings = tuple(i.as_line_item() for i in recurring_items if i.kind == LineItemKind.BENEFIT)
        deductions = [i.as_line_item() for i in recurring_items if i.kind == LineItemKind.DEDUCTION]
        if lop_days > 0:
            deductions.append(
                LineItem(name=f"Loss of Pay ({format_days(lop_days)} days)", amount=lop_amount, kind=LineItemKind.LOP)
            )

        total_earnings = money(base + sum((i.amount for i in earnings), ZERO))
        total_deductions = money(sum((i.amount for i in deductions), ZERO))

        return SalaryComputation(
            employee_id=employee.employee_id,
            salary_period=attendance.start.replace(day=1),
            basic_salary=base,
            working_days=working_days,
            marked_absent_days=attendance.absent_days,
            no_show_days=attendance.no_show_days,
            half_days=attendance.half_days,
            unpaid_leave_days=attendance.unpaid_leave_days,
            lop_days=lop_days,
            per_day_salary=per_day,
            lop_amount=lop_amount,
            earnings=earnings,
            deductions=tuple(deductions),
            total_earnings=total_earnings,
            total_deductions=total_deductions,
            net_payable=money(max(ZERO, total_earnings - total_deductions)),
        )
