from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders, to_decimal
from .model import Employee
from .repository import EmployeeRepository


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        tenant_id=int(r["tenant_id"]),
        full_name=r["full_name"],
        base_salary=to_decimal(r.get("base_salary")),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, tenant_id, full_name, base_salary, is_active
                FROM employees
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def list_active(
        self,
        *,
        tenant_id: Optional[int] = None,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[Employee]:
        clauses = ["is_active=1"]
        params: list[object] = []

        if tenant_id is not None:
            clauses.append("tenant_id=%s")
            params.append(int(tenant_id))
        if employee_ids is not None:
            ids = [int(i) for i in employee_ids]
            if not ids:
                return []
            clauses.append(f"employee_id IN ({placeholders(ids)})")
            params.extend(ids)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT employee_id, tenant_id, full_name, base_salary, is_active
                FROM employees
                WHERE {where}
                ORDER BY employee_id
                """,
                tuple(params),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]
