from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeavePayType, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT r.request_id, r.employee_id, c.title AS category, c.is_paid,
           r.start_date, r.end_date, r.status, r.reason, r.approved_by
    FROM leave_requests r
    JOIN leave_categories c ON c.category_id = r.category_id
"""


def _row_to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        category=r.get("category") or "Leave",
        pay_type=LeavePayType.PAID if int(r.get("is_paid") or 0) else LeavePayType.UNPAID,
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=RequestStatus(r["status"]),
        reason=r.get("reason"),
        approved_by=r.get("approved_by"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_approved_overlapping(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE r.employee_id=%s AND r.status=%s AND r.start_date<=%s AND r.end_date>=%s"
                " ORDER BY r.start_date",
                (int(employee_id), RequestStatus.APPROVED.value, end, start),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def get_approved_covering(self, *, employee_id: int, on_date: date) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE r.employee_id=%s AND r.status=%s AND r.start_date<=%s AND r.end_date>=%s
                ORDER BY r.start_date
                LIMIT 1
                """,
                (int(employee_id), RequestStatus.APPROVED.value, on_date, on_date),
            )
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def list_approved_covering(self, *, on_date: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                WHERE r.status=%s AND r.start_date<=%s AND r.end_date>=%s
                ORDER BY r.employee_id
                """,
                (RequestStatus.APPROVED.value, on_date, on_date),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]
