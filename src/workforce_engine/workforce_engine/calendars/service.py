from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.dates import iter_days, ranges_overlap
from ..common.validators import require_ordered
from ..core.enums import Weekday
from ..core.exceptions import (
    ConflictError,
    NotFoundError,
    OpenRecordExistsError,
    OverlapConflictError,
    ValidationError,
)
from .model import CalendarConfiguration, CalendarDraft, WeekdayFlags, WorkingDays
from .repository import CalendarRepository

logger = logging.getLogger(__name__)

_KEEP = object()


def find_conflict(
    existing: Iterable[CalendarConfiguration],
    *,
    valid_from: Optional[date],
    valid_to: Optional[date],
    exclude_id: Optional[int] = None,
) -> Optional[ConflictError]:
    """Return the error a write of ``[valid_from, valid_to]`` would collide with.

    Creates pass ``exclude_id=None``: any open-ended configuration blocks them.
    Updates only clash with a *different* open-ended one, and only when the
    proposed range is itself open-ended.
    """

    others = [c for c in existing if exclude_id is None or c.config_id != exclude_id]

    for other in others:
        if not other.is_open_ended:
            continue
        if exclude_id is None or valid_to is None:
            return OpenRecordExistsError(
                "An open-ended calendar configuration already exists. Set its end date before adding another.",
                existing=other,
            )

    for other in others:
        if ranges_overlap(valid_from, valid_to, other.valid_from, other.valid_to):
            return OverlapConflictError(
                "Calendar configuration overlaps an existing configuration.",
                existing=other,
            )
    return None


class CalendarService:
    def __init__(self, calendars: CalendarRepository):
        self._calendars = calendars

    def active_configuration(self, *, tenant_id: int, on_date: date) -> CalendarConfiguration:
        return self._configuration_for(tenant_id=tenant_id, start=on_date, end=on_date)

    def resolve_working_days(self, *, tenant_id: int, start: date, end: date) -> WorkingDays:
        if start > end:
            raise ValidationError("start_date must be on or before end_date")

        config = self._configuration_for(tenant_id=tenant_id, start=start, end=end)
        working: list[date] = []
        non_working: list[date] = []
        for day in iter_days(start, end):
            (working if config.flags.is_working(Weekday.of(day)) else non_working).append(day)

        return WorkingDays(
            start=start,
            end=end,
            working_weekdays=config.flags.working_weekdays(),
            working_dates=tuple(working),
            non_working_dates=tuple(non_working),
            configuration=config,
        )

    def count_working_days(self, *, tenant_id: int, start: date, end: date) -> int:
        return self.resolve_working_days(tenant_id=tenant_id, start=start, end=end).total_working_days

    def is_working_day(self, *, tenant_id: int, on_date: date) -> bool:
        return self.active_configuration(tenant_id=tenant_id, on_date=on_date).flags.is_working(Weekday.of(on_date))

    def get_configuration(self, config_id: int, *, tenant_id: int) -> CalendarConfiguration:
        config = self._calendars.get_by_id(int(config_id), tenant_id=int(tenant_id))
        if not config:
            raise NotFoundError("Calendar configuration not found")
        return config

    def list_configurations(self, *, tenant_id: int) -> Sequence[CalendarConfiguration]:
        return self._calendars.list_for_tenant(int(tenant_id))

    def create_configuration(
        self,
        *,
        tenant_id: int,
        flags: WeekdayFlags,
        valid_from: Optional[date] = None,
        valid_to: Optional[date] = None,
    ) -> CalendarConfiguration:
        require_ordered(valid_from, valid_to, start_name="valid_from", end_name="valid_to")
        draft = CalendarDraft(flags=flags, valid_from=valid_from, valid_to=valid_to)

        with self._calendars.locked(int(tenant_id)) as scope:
            conflict = find_conflict(scope.existing, valid_from=valid_from, valid_to=valid_to)
            if conflict:
                raise conflict
            created = scope.insert(draft)

        logger.info(
            "Calendar configuration %s created for tenant %s (%s..%s)",
            created.config_id, tenant_id, valid_from, valid_to,
        )
        return created

    def update_configuration(
        self,
        config_id: int,
        *,
        tenant_id: int,
        flags: Optional[WeekdayFlags] = None,
        valid_from=_KEEP,
        valid_to=_KEEP,
    ) -> CalendarConfiguration:
        """Change weekdays and/or validity window; omitted arguments keep stored values.

        Passing ``valid_to=None`` explicitly reopens the configuration.
        """

        with self._calendars.locked(int(tenant_id)) as scope:
            current = next((c for c in scope.existing if c.config_id == int(config_id)), None)
            if not current:
                raise NotFoundError("Calendar configuration not found")

            draft = CalendarDraft(
                flags=flags or current.flags,
                valid_from=current.valid_from if valid_from is _KEEP else valid_from,
                valid_to=current.valid_to if valid_to is _KEEP else valid_to,
            )
            require_ordered(draft.valid_from, draft.valid_to, start_name="valid_from", end_name="valid_to")

            conflict = find_conflict(
                scope.existing,
                valid_from=draft.valid_from,
                valid_to=draft.valid_to,
                exclude_id=current.config_id,
            )
            if conflict:
                raise conflict
            updated = scope.update(current.config_id, draft)

        logger.info("Calendar configuration %s updated for tenant %s", config_id, tenant_id)
        return updated

    def delete_configuration(self, config_id: int, *, tenant_id: int) -> None:
        if not self._calendars.delete(int(config_id), tenant_id=int(tenant_id)):
            raise NotFoundError("Calendar configuration not found")
        logger.info("Calendar configuration %s deleted for tenant %s", config_id, tenant_id)

    def _configuration_for(self, *, tenant_id: int, start: date, end: date) -> CalendarConfiguration:
        found = self._calendars.find_overlapping(tenant_id=int(tenant_id), start=start, end=end)
        if found:
            return found
        return CalendarConfiguration(config_id=None, tenant_id=int(tenant_id), flags=WeekdayFlags.default())
