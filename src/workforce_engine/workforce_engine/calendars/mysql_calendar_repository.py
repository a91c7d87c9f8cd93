from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator, Optional, Sequence

from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CalendarConfiguration, CalendarDraft, WeekdayFlags
from .repository import CalendarRepository, CalendarWriteScope

_COLUMNS = "config_id, tenant_id, monday, tuesday, wednesday, thursday, friday, saturday, sunday, valid_from, valid_to"
_ORDER = "ORDER BY valid_from IS NOT NULL, valid_from, config_id"


def _row_to_config(r: dict) -> CalendarConfiguration:
    return CalendarConfiguration(
        config_id=int(r["config_id"]),
        tenant_id=int(r["tenant_id"]),
        flags=WeekdayFlags(**{d.value: bool(r[d.value]) for d in Weekday}),
        valid_from=r.get("valid_from"),
        valid_to=r.get("valid_to"),
    )


def _draft_params(draft: CalendarDraft) -> tuple:
    return tuple(int(draft.flags.is_working(d)) for d in Weekday) + (draft.valid_from, draft.valid_to)


class _MySQLCalendarWriteScope(CalendarWriteScope):
    def __init__(self, cur, tenant_id: int, existing: Sequence[CalendarConfiguration]):
        self._cur = cur
        self._tenant_id = int(tenant_id)
        self.existing = existing

    def insert(self, draft: CalendarDraft) -> CalendarConfiguration:
        self._cur.execute(
            """
            INSERT INTO calendar_configurations(
                tenant_id, monday, tuesday, wednesday, thursday, friday, saturday, sunday, valid_from, valid_to
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (self._tenant_id,) + _draft_params(draft),
        )
        return CalendarConfiguration(
            config_id=int(self._cur.lastrowid),
            tenant_id=self._tenant_id,
            flags=draft.flags,
            valid_from=draft.valid_from,
            valid_to=draft.valid_to,
        )

    def update(self, config_id: int, draft: CalendarDraft) -> CalendarConfiguration:
        self._cur.execute(
            """
            UPDATE calendar_configurations
            SET monday=%s, tuesday=%s, wednesday=%s, thursday=%s, friday=%s, saturday=%s, sunday=%s,
                valid_from=%s, valid_to=%s
            WHERE config_id=%s AND tenant_id=%s
            """,
            _draft_params(draft) + (int(config_id), self._tenant_id),
        )
        return CalendarConfiguration(
            config_id=int(config_id),
            tenant_id=self._tenant_id,
            flags=draft.flags,
            valid_from=draft.valid_from,
            valid_to=draft.valid_to,
        )


class MySQLCalendarRepository(CalendarRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, config_id: int, *, tenant_id: int) -> Optional[CalendarConfiguration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM calendar_configurations WHERE config_id=%s AND tenant_id=%s",
                (int(config_id), int(tenant_id)),
            )
            r = fetchone(cur)
            return _row_to_config(r) if r else None

    def list_for_tenant(self, tenant_id: int) -> Sequence[CalendarConfiguration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM calendar_configurations WHERE tenant_id=%s {_ORDER}",
                (int(tenant_id),),
            )
            return [_row_to_config(r) for r in fetchall(cur)]

    def find_overlapping(self, *, tenant_id: int, start: date, end: date) -> Optional[CalendarConfiguration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM calendar_configurations
                WHERE tenant_id=%s
                  AND (valid_from IS NULL OR valid_from <= %s)
                  AND (valid_to IS NULL OR valid_to >= %s)
                {_ORDER}
                LIMIT 1
                """,
                (int(tenant_id), end, start),
            )
            r = fetchone(cur)
            return _row_to_config(r) if r else None

    @contextmanager
    def locked(self, tenant_id: int) -> Iterator[CalendarWriteScope]:
        # FOR UPDATE takes next-key locks on the tenant index, so a concurrent
        # writer for the same tenant waits here until this transaction ends.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM calendar_configurations WHERE tenant_id=%s {_ORDER} FOR UPDATE",
                (int(tenant_id),),
            )
            existing = [_row_to_config(r) for r in fetchall(cur)]
            yield _MySQLCalendarWriteScope(cur, tenant_id, existing)

    def delete(self, config_id: int, *, tenant_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM calendar_configurations WHERE config_id=%s AND tenant_id=%s",
                (int(config_id), int(tenant_id)),
            )
            return cur.rowcount > 0
