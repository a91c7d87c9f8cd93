from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, to_decimal
from .model import ShiftAssignment, ShiftDefinition, ShiftDraft
from .repository import ShiftRepository

_SHIFT_COLUMNS = "s.shift_id, s.shift_name, s.start_time, s.end_time, s.overtime_after_hours, s.is_night_shift, s.break_minutes"
_ASSIGNMENT_COLUMNS = "a.assignment_id, a.shift_id, a.employee_id, a.effective_from, a.effective_to, s.shift_name"


def _row_to_shift(r: dict) -> ShiftDefinition:
    return ShiftDefinition(
        shift_id=int(r["shift_id"]),
        shift_name=r["shift_name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        overtime_after_hours=to_decimal(r.get("overtime_after_hours")),
        is_night_shift=bool(r.get("is_night_shift")),
        break_minutes=int(r.get("break_minutes") or 0),
    )


def _row_to_assignment(r: dict) -> ShiftAssignment:
    return ShiftAssignment(
        assignment_id=int(r["assignment_id"]),
        shift_id=int(r["shift_id"]),
        employee_id=int(r["employee_id"]),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        shift_name=r.get("shift_name"),
    )


def _draft_params(draft: ShiftDraft) -> tuple:
    return (
        draft.shift_name,
        draft.start_time,
        draft.end_time,
        draft.overtime_after_hours,
        int(draft.is_night_shift),
        int(draft.break_minutes),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ShiftDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SHIFT_COLUMNS} FROM shifts s ORDER BY s.shift_id")
            return [_row_to_shift(r) for r in fetchall(cur)]

    def get_by_id(self, shift_id: int) -> Optional[ShiftDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SHIFT_COLUMNS} FROM shifts s WHERE s.shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def create(self, draft: ShiftDraft) -> ShiftDefinition:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(shift_name, start_time, end_time, overtime_after_hours, is_night_shift, break_minutes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                _draft_params(draft),
            )
            shift_id = int(cur.lastrowid)
        return ShiftDefinition(shift_id=shift_id, **asdict(draft))

    def update(self, shift_id: int, draft: ShiftDraft) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts
                SET shift_name=%s, start_time=%s, end_time=%s, overtime_after_hours=%s,
                    is_night_shift=%s, break_minutes=%s
                WHERE shift_id=%s
                """,
                _draft_params(draft) + (int(shift_id),),
            )
            # rowcount is 0 for an unchanged row, so existence is checked separately.
            cur.execute("SELECT 1 AS found FROM shifts WHERE shift_id=%s", (int(shift_id),))
            return fetchone(cur) is not None

    def delete(self, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shifts WHERE shift_id=%s", (int(shift_id),))
            return cur.rowcount > 0

    def find_for_employee(self, *, employee_id: int, on_date: date) -> Optional[ShiftDefinition]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SHIFT_COLUMNS}
                FROM shift_assignments a
                JOIN shifts s ON s.shift_id = a.shift_id
                WHERE a.employee_id=%s
                  AND a.effective_from <= %s
                  AND (a.effective_to IS NULL OR a.effective_to >= %s)
                ORDER BY a.effective_from, a.assignment_id
                LIMIT 1
                """,
                (int(employee_id), on_date, on_date),
            )
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def upsert_assignment(
        self,
        *,
        shift_id: int,
        employee_id: int,
        effective_from: date,
        effective_to: Optional[date],
    ) -> ShiftAssignment:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_assignments(shift_id, employee_id, effective_from, effective_to)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE effective_from=VALUES(effective_from), effective_to=VALUES(effective_to)
                """,
                (int(shift_id), int(employee_id), effective_from, effective_to),
            )
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM shift_assignments a
                JOIN shifts s ON s.shift_id = a.shift_id
                WHERE a.shift_id=%s AND a.employee_id=%s
                """,
                (int(shift_id), int(employee_id)),
            )
            return _row_to_assignment(fetchone(cur))

    def list_assignments(self, *, employee_id: int, start: date, end: date) -> Sequence[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM shift_assignments a
                JOIN shifts s ON s.shift_id = a.shift_id
                WHERE a.employee_id=%s
                  AND a.effective_from <= %s
                  AND (a.effective_to IS NULL OR a.effective_to >= %s)
                ORDER BY a.effective_from, a.assignment_id
                """,
                (int(employee_id), end, start),
            )
            return [_row_to_assignment(r) for r in fetchall(cur)]

    def delete_assignment(self, assignment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_assignments WHERE assignment_id=%s", (int(assignment_id),))
            return cur.rowcount > 0

    def list_in_force(self, *, on_date: date) -> Sequence[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM shift_assignments a
                JOIN shifts s ON s.shift_id = a.shift_id
                WHERE a.effective_from <= %s
                  AND (a.effective_to IS NULL OR a.effective_to >= %s)
                ORDER BY a.employee_id, a.effective_from, a.assignment_id
                """,
                (on_date, on_date),
            )
            return [_row_to_assignment(r) for r in fetchall(cur)]
