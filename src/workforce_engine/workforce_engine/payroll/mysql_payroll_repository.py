from __future__ import annotations

import json
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import LineItemKind, SlipStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_list, placeholders, to_decimal
from .model import LineItem, PaymentInfo, RecurringItem, SalaryComputation, SalarySlip
from .repository import RecurringItemRepository, SalarySlipRepository

_SLIP_COLUMNS = """
    s.slip_id, s.employee_id, s.salary_period, s.basic_salary, s.earnings_breakdown, s.deductions_breakdown,
    s.total_earnings, s.total_deductions, s.net_payable, s.status, s.generated_at,
    s.paid_at, s.payment_method, s.payment_reference
"""


def _dump_items(items: Sequence[LineItem]) -> str:
    return json.dumps([i.to_dict() for i in items])


def _row_to_slip(r: dict) -> SalarySlip:
    return SalarySlip(
        slip_id=int(r["slip_id"]),
        employee_id=int(r["employee_id"]),
        salary_period=r["salary_period"],
        basic_salary=to_decimal(r["basic_salary"]),
        earnings=tuple(LineItem.from_dict(i) for i in load_json_list(r.get("earnings_breakdown"))),
        deductions=tuple(LineItem.from_dict(i) for i in load_json_list(r.get("deductions_breakdown"))),
        total_earnings=to_decimal(r["total_earnings"]),
        total_deductions=to_decimal(r["total_deductions"]),
        net_payable=to_decimal(r["net_payable"]),
        status=SlipStatus(r["status"]),
        generated_at=r["generated_at"],
        paid_at=r.get("paid_at"),
        payment_method=r.get("payment_method"),
        payment_reference=r.get("payment_reference"),
    )


def _figures(c: SalaryComputation) -> tuple:
    return (
        c.basic_salary,
        _dump_items(c.earnings),
        _dump_items(c.deductions),
        c.total_earnings,
        c.total_deductions,
        c.net_payable,
    )


class MySQLSalarySlipRepository(SalarySlipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, slip_id: int) -> Optional[SalarySlip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SLIP_COLUMNS} FROM salary_slips s WHERE s.slip_id=%s", (int(slip_id),))
            r = fetchone(cur)
            return _row_to_slip(r) if r else None

    def find_for_period(self, *, employee_id: int, salary_period: date) -> Optional[SalarySlip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SLIP_COLUMNS} FROM salary_slips s WHERE s.employee_id=%s AND s.salary_period=%s",
                (int(employee_id), salary_period),
            )
            r = fetchone(cur)
            return _row_to_slip(r) if r else None

    def insert_if_absent(self, computation: SalaryComputation, *, generated_at: datetime) -> SalarySlip:
        with db_cursor(self._conn_factory) as (_, cur):
            # The unique (employee_id, salary_period) key decides concurrent callers;
            # the no-op update leaves a pre-existing row untouched.
            cur.execute(
                """
                INSERT INTO salary_slips(
                    employee_id, salary_period, basic_salary, earnings_breakdown, deductions_breakdown,
                    total_earnings, total_deductions, net_payable, status, generated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE slip_id=slip_id
                """,
                (int(computation.employee_id), computation.salary_period)
                + _figures(computation)
                + (SlipStatus.GENERATED.value, generated_at),
            )
            cur.execute(
                f"SELECT {_SLIP_COLUMNS} FROM salary_slips s WHERE s.employee_id=%s AND s.salary_period=%s",
                (int(computation.employee_id), computation.salary_period),
            )
            return _row_to_slip(fetchone(cur))

    def replace_figures(self, slip_id: int, computation: SalaryComputation, *, generated_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_slips
                SET basic_salary=%s, earnings_breakdown=%s, deductions_breakdown=%s,
                    total_earnings=%s, total_deductions=%s, net_payable=%s, generated_at=%s
                WHERE slip_id=%s AND status=%s
                """,
                _figures(computation) + (generated_at, int(slip_id), SlipStatus.GENERATED.value),
            )
            return cur.rowcount > 0

    def mark_paid(self, slip_ids: Iterable[int], payment: PaymentInfo, *, paid_at: datetime) -> int:
        ids = [int(i) for i in slip_ids]
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE salary_slips
                SET status=%s, paid_at=%s, payment_method=%s, payment_reference=%s
                WHERE status=%s AND slip_id IN ({placeholders(ids)})
                """,
                (SlipStatus.PAID.value, paid_at, payment.method, payment.reference, SlipStatus.GENERATED.value, *ids),
            )
            return int(cur.rowcount)

    def list_for_period(self, *, salary_period: date, tenant_id: Optional[int] = None) -> Sequence[SalarySlip]:
        sql = f"""
            SELECT {_SLIP_COLUMNS}
            FROM salary_slips s
            JOIN employees e ON e.employee_id = s.employee_id
            WHERE s.salary_period=%s
        """
        params: list[object] = [salary_period]
        if tenant_id is not None:
            sql += " AND e.tenant_id=%s"
            params.append(int(tenant_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY s.employee_id", tuple(params))
            return [_row_to_slip(r) for r in fetchall(cur)]

    def history(self, *, employee_id: int, limit: int) -> Sequence[SalarySlip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SLIP_COLUMNS}
                FROM salary_slips s
                WHERE s.employee_id=%s
                ORDER BY s.salary_period DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_row_to_slip(r) for r in fetchall(cur)]


class MySQLRecurringItemRepository(RecurringItemRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self, employee_id: int) -> Sequence[RecurringItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT item_id, employee_id, kind, title, amount
                FROM recurring_pay_items
                WHERE employee_id=%s AND is_active=1
                ORDER BY kind, item_id
                """,
                (int(employee_id),),
            )
            return [
                RecurringItem(
                    item_id=int(r["item_id"]),
                    employee_id=int(r["employee_id"]),
                    kind=LineItemKind(r["kind"]),
                    title=r["title"],
                    amount=to_decimal(r["amount"]),
                )
                for r in fetchall(cur)
            ]
