from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Sequence

from mysql.connector import Error as MySQLError

from ..core.enums import WorkLogStatus
from ..core.exceptions import ConcurrentWriteError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_write_conflict, normalize_mysql_time, placeholders
from .model import GeoPoint, WorkLog
from .repository import AttendanceRepository, WorkLogScope

_COLUMNS = """
    log_id, employee_id, log_date, status, clock_in, clock_out, total_hours,
    late_minutes, early_leave_minutes, overtime_minutes, break_minutes, notes,
    clock_in_ip, clock_in_latitude, clock_in_longitude, clock_in_accuracy,
    clock_out_ip, clock_out_latitude, clock_out_longitude, clock_out_accuracy,
    tenant_id, author_id
"""

_WRITE_FIELDS = (
    "status", "clock_in", "clock_out", "total_hours",
    "late_minutes", "early_leave_minutes", "overtime_minutes", "break_minutes", "notes",
    "clock_in_ip", "clock_in_latitude", "clock_in_longitude", "clock_in_accuracy",
    "clock_out_ip", "clock_out_latitude", "clock_out_longitude", "clock_out_accuracy",
    "tenant_id", "author_id",
)


def _geo(r: dict, prefix: str) -> Optional[GeoPoint]:
    lat = r.get(f"{prefix}_latitude")
    lng = r.get(f"{prefix}_longitude")
    if lat is None or lng is None:
        return None
    acc = r.get(f"{prefix}_accuracy")
    return GeoPoint(latitude=Decimal(str(lat)), longitude=Decimal(str(lng)), accuracy=Decimal(str(acc)) if acc is not None else None)


def _row_to_log(r: dict) -> WorkLog:
    total = r.get("total_hours")
    return WorkLog(
        log_id=int(r["log_id"]),
        employee_id=int(r["employee_id"]),
        log_date=r["log_date"],
        status=WorkLogStatus(r["status"]),
        clock_in=normalize_mysql_time(r.get("clock_in")),
        clock_out=normalize_mysql_time(r.get("clock_out")),
        total_hours=Decimal(str(total)) if total is not None else None,
        late_minutes=int(r.get("late_minutes") or 0),
        early_leave_minutes=int(r.get("early_leave_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        break_minutes=int(r.get("break_minutes") or 0),
        notes=r.get("notes"),
        clock_in_ip=r.get("clock_in_ip"),
        clock_in_location=_geo(r, "clock_in"),
        clock_out_ip=r.get("clock_out_ip"),
        clock_out_location=_geo(r, "clock_out"),
        tenant_id=int(r["tenant_id"]) if r.get("tenant_id") is not None else None,
        author_id=int(r["author_id"]) if r.get("author_id") is not None else None,
    )


def _write_params(log: WorkLog) -> tuple:
    cin = log.clock_in_location
    cout = log.clock_out_location
    return (
        log.status.value,
        log.clock_in,
        log.clock_out,
        log.total_hours,
        int(log.late_minutes),
        int(log.early_leave_minutes),
        int(log.overtime_minutes),
        int(log.break_minutes),
        log.notes,
        log.clock_in_ip,
        cin.latitude if cin else None,
        cin.longitude if cin else None,
        cin.accuracy if cin else None,
        log.clock_out_ip,
        cout.latitude if cout else None,
        cout.longitude if cout else None,
        cout.accuracy if cout else None,
        log.tenant_id,
        log.author_id,
    )


class _MySQLWorkLogScope(WorkLogScope):
    def __init__(self, cur, record: Optional[WorkLog]):
        self._cur = cur
        self.record = record

    def save(self, log: WorkLog) -> WorkLog:
        if log.log_id is None:
            self._cur.execute(
                f"""
                INSERT INTO work_logs(employee_id, log_date, {", ".join(_WRITE_FIELDS)})
                VALUES(%s,%s,{placeholders(_WRITE_FIELDS)})
                """,
                (int(log.employee_id), log.log_date) + _write_params(log),
            )
            saved = replace(log, log_id=int(self._cur.lastrowid))
        else:
            assignments = ", ".join(f"{name}=%s" for name in _WRITE_FIELDS)
            self._cur.execute(
                f"UPDATE work_logs SET {assignments} WHERE log_id=%s",
                _write_params(log) + (int(log.log_id),),
            )
            saved = log
        self.record = saved
        return saved


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, log_id: int) -> Optional[WorkLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_logs WHERE log_id=%s", (int(log_id),))
            r = fetchone(cur)
            return _row_to_log(r) if r else None

    def get_for_day(self, *, employee_id: int, log_date: date) -> Optional[WorkLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM work_logs WHERE employee_id=%s AND log_date=%s",
                (int(employee_id), log_date),
            )
            r = fetchone(cur)
            return _row_to_log(r) if r else None

    @contextmanager
    def locked_day(self, *, employee_id: int, log_date: date) -> Iterator[WorkLogScope]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT {_COLUMNS} FROM work_logs WHERE employee_id=%s AND log_date=%s FOR UPDATE",
                    (int(employee_id), log_date),
                )
                r = fetchone(cur)
                yield _MySQLWorkLogScope(cur, _row_to_log(r) if r else None)
        except MySQLError as exc:
            if is_write_conflict(exc):
                raise ConcurrentWriteError("Work log was written concurrently") from exc
            raise

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Sequence[WorkLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM work_logs
                WHERE employee_id=%s AND log_date BETWEEN %s AND %s
                ORDER BY log_date
                """,
                (int(employee_id), start, end),
            )
            return [_row_to_log(r) for r in fetchall(cur)]

    def list_for_date(self, *, on_date: date, employee_ids: Optional[Iterable[int]] = None) -> Sequence[WorkLog]:
        sql = f"SELECT {_COLUMNS} FROM work_logs WHERE log_date=%s"
        params: list[object] = [on_date]
        if employee_ids is not None:
            ids = [int(i) for i in employee_ids]
            if not ids:
                return []
            sql += f" AND employee_id IN ({placeholders(ids)})"
            params.extend(ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY employee_id", tuple(params))
            return [_row_to_log(r) for r in fetchall(cur)]

    def delete(self, log_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM work_logs WHERE log_id=%s", (int(log_id),))
            return cur.rowcount > 0
