from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.constants import MONEY_PLACES
from ..core.enums import LineItemKind, SlipStatus


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal(MONEY_PLACES), rounding=ROUND_HALF_UP)


def format_days(days: Decimal) -> str:
    """``Decimal("2.5")`` -> ``"2.5"``, ``Decimal("3.0")`` -> ``"3"``."""

    if days == days.to_integral_value():
        return str(int(days))
    return format(days.normalize(), "f")


@dataclass(frozen=True)
class LineItem:
    name: str
    amount: Decimal
    kind: LineItemKind

    def to_dict(self) -> dict:
        return {"name": self.name, "amount": str(self.amount), "kind": self.kind.value}

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        return cls(name=str(data["name"]), amount=money(data["amount"]), kind=LineItemKind(data["kind"]))


@dataclass(frozen=True)
class RecurringItem:
    """An active recurring benefit or deduction attached to an employee."""

    item_id: int
    employee_id: int
    kind: LineItemKind
    title: str
    amount: Decimal

    def as_line_item(self) -> LineItem:
        return LineItem(name=self.title, amount=money(self.amount), kind=self.kind)


@dataclass(frozen=True)
class SalaryComputation:
    """Every figure behind one employee's pay for one period. Nothing here is persisted."""

    employee_id: int
    salary_period: date
    basic_salary: Decimal
    working_days: int
    marked_absent_days: int
    no_show_days: int
    half_days: int
    unpaid_leave_days: int
    lop_days: Decimal
    per_day_salary: Decimal
    lop_amount: Decimal
    earnings: tuple[LineItem, ...]
    deductions: tuple[LineItem, ...]
    total_earnings: Decimal
    total_deductions: Decimal
    net_payable: Decimal

    @property
    def total_absent_days(self) -> int:
        return self.marked_absent_days + self.no_show_days

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "salary_period": self.salary_period.isoformat(),
            "attendance": {
                "working_days": self.working_days,
                "absent_days": self.total_absent_days,
                "marked_absent_days": self.marked_absent_days,
                "no_show_days": self.no_show_days,
                "half_days": self.half_days,
                "unpaid_leave_days": self.unpaid_leave_days,
                "lop_days": str(self.lop_days),
            },
            "salary": {
                "basic_salary": str(self.basic_salary),
                "per_day_salary": str(money(self.per_day_salary)),
                "lop_amount": str(self.lop_amount),
                "total_earnings": str(self.total_earnings),
                "total_deductions": str(self.total_deductions),
                "net_payable": str(self.net_payable),
            },
            "earnings": [i.to_dict() for i in self.earnings],
            "deductions": [i.to_dict() for i in self.deductions],
        }


@dataclass(frozen=True)
class PaymentInfo:
    method: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class SalarySlip:
    slip_id: int
    employee_id: int
    salary_period: date
    basic_salary: Decimal
    earnings: tuple[LineItem, ...]
    deductions: tuple[LineItem, ...]
    total_earnings: Decimal
    total_deductions: Decimal
    net_payable: Decimal
    status: SlipStatus
    generated_at: datetime
    paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.status == SlipStatus.PAID

    def to_dict(self) -> dict:
        return {
            "id": self.slip_id,
            "employee_id": self.employee_id,
            "salary_period": self.salary_period.isoformat(),
            "basic_salary": str(self.basic_salary),
            "earnings": [i.to_dict() for i in self.earnings],
            "deductions": [i.to_dict() for i in self.deductions],
            "total_earnings": str(self.total_earnings),
            "total_deductions": str(self.total_deductions),
            "net_payable": str(self.net_payable),
            "status": self.status.value,
            "generated_at": self.generated_at.isoformat(),
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
            "payment_method": self.payment_method,
            "payment_reference": self.payment_reference,
        }


@dataclass(frozen=True)
class PayrollSummary:
    month: int
    year: int
    total_employees: int = 0
    total_earnings: Decimal = Decimal("0.00")
    total_deductions: Decimal = Decimal("0.00")
    total_net_payable: Decimal = Decimal("0.00")
    paid_count: int = 0
    pending_count: int = 0
    slips: tuple[SalarySlip, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "salary_period": date(self.year, self.month, 1).isoformat(),
            "total_employees": self.total_employees,
            "total_earnings": str(self.total_earnings),
            "total_deductions": str(self.total_deductions),
            "total_net_payable": str(self.total_net_payable),
            "paid_count": self.paid_count,
            "pending_count": self.pending_count,
        }
