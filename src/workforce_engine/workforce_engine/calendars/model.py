from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Optional

from ..core.constants import DEFAULT_WORKING_WEEKDAYS
from ..core.enums import Weekday


@dataclass(frozen=True)
class WeekdayFlags:
    monday: bool = True
    tuesday: bool = True
    wednesday: bool = True
    thursday: bool = True
    friday: bool = True
    saturday: bool = False
    sunday: bool = False

    @classmethod
    def default(cls) -> "WeekdayFlags":
        return cls(*DEFAULT_WORKING_WEEKDAYS)

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], *, base: Optional["WeekdayFlags"] = None) -> "WeekdayFlags":
        base = base or cls.default()
        values = {d.value: bool(data[d.value]) if d.value in data else getattr(base, d.value) for d in Weekday}
        return cls(**values)

    def is_working(self, weekday: Weekday) -> bool:
        return bool(getattr(self, weekday.value))

    def working_weekdays(self) -> frozenset[Weekday]:
        return frozenset(d for d in Weekday if self.is_working(d))

    def to_dict(self) -> dict[str, bool]:
        return {d.value: self.is_working(d) for d in Weekday}


@dataclass(frozen=True)
class CalendarConfiguration:
    """Which weekdays a tenant works, over an optional validity window.

    ``valid_from=None`` reaches back indefinitely, ``valid_to=None`` is open-ended.
    A configuration without ``config_id`` is the built-in Monday-Friday default.
    """

    config_id: Optional[int]
    tenant_id: int
    flags: WeekdayFlags
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None

    @property
    def is_default(self) -> bool:
        return self.config_id is None

    @property
    def is_open_ended(self) -> bool:
        return self.valid_to is None

    def to_dict(self) -> dict:
        return {
            "id": self.config_id,
            "tenant_id": self.tenant_id,
            **self.flags.to_dict(),
            "valid_from": self.valid_from.isoformat() if self.valid_from else None,
            "valid_to": self.valid_to.isoformat() if self.valid_to else None,
            "is_default": self.is_default,
        }


@dataclass(frozen=True)
class CalendarDraft:
    flags: WeekdayFlags
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None


@dataclass(frozen=True)
class WorkingDays:
    start: date
    end: date
    working_weekdays: frozenset[Weekday]
    working_dates: tuple[date, ...] = field(default_factory=tuple)
    non_working_dates: tuple[date, ...] = field(default_factory=tuple)
    configuration: Optional[CalendarConfiguration] = None

    @property
    def total_working_days(self) -> int:
        return len(self.working_dates)

    def is_working(self, on_date: date) -> bool:
        return on_date in self.working_dates

    def to_dict(self) -> dict:
        return {
            "start_date": self.start.isoformat(),
            "end_date": self.end.isoformat(),
            "total_days": len(self.working_dates) + len(self.non_working_dates),
            "working_days_count": self.total_working_days,
            "working_days": [d.value for d in Weekday if d in self.working_weekdays],
            "working_dates": [d.isoformat() for d in self.working_dates],
            "non_working_dates": [d.isoformat() for d in self.non_working_dates],
        }
