from __future__ import annotations

from datetime import date
from typing import ContextManager, Optional, Protocol, Sequence

from .model import CalendarConfiguration, CalendarDraft


class CalendarWriteScope(Protocol):
    """Tenant-wide write lock held for the duration of one transaction.

    ``existing`` is read under the lock, so a check against it stays valid until
    the scope closes.
    """

    existing: Sequence[CalendarConfiguration]

    def insert(self, draft: CalendarDraft) -> CalendarConfiguration:
        raise NotImplementedError

    def update(self, config_id: int, draft: CalendarDraft) -> CalendarConfiguration:
        raise NotImplementedError


class CalendarRepository(Protocol):
    def get_by_id(self, config_id: int, *, tenant_id: int) -> Optional[CalendarConfiguration]:
        raise NotImplementedError

    def list_for_tenant(self, tenant_id: int) -> Sequence[CalendarConfiguration]:
        """Ordered by valid_from, open start first."""

        raise NotImplementedError

    def find_overlapping(self, *, tenant_id: int, start: date, end: date) -> Optional[CalendarConfiguration]:
        """First configuration (by valid_from) whose range intersects ``[start, end]``."""

        raise NotImplementedError

    def locked(self, tenant_id: int) -> ContextManager[CalendarWriteScope]:
        raise NotImplementedError

    def delete(self, config_id: int, *, tenant_id: int) -> bool:
        raise NotImplementedError
