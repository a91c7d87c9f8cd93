from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Mapping, Optional, Protocol
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE


class Clock(Protocol):
    def now(self) -> datetime:
        """Current instant as an aware datetime."""

        raise NotImplementedError


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass
class FixedClock:
    """Clock frozen at one instant. Naive values are read as UTC."""

    instant: datetime

    def now(self) -> datetime:
        if self.instant.tzinfo is None:
            return self.instant.replace(tzinfo=timezone.utc)
        return self.instant

    def set(self, instant: datetime) -> None:
        self.instant = instant


@dataclass
class TenantClock:
    """Local wall-clock time per tenant.

    Every tenant resolves to exactly one zone: its entry in ``overrides`` or the
    configured default. Returned datetimes are naive local values, which is how
    shift times and work log times are stored.
    """

    clock: Clock = field(default_factory=SystemClock)
    default_timezone: str = DEFAULT_TIMEZONE
    overrides: Mapping[int, str] = field(default_factory=dict)

    def zone_for(self, tenant_id: Optional[int]) -> ZoneInfo:
        name = self.overrides.get(int(tenant_id), self.default_timezone) if tenant_id is not None else self.default_timezone
        return ZoneInfo(name)

    def now(self, tenant_id: Optional[int]) -> datetime:
        return self.clock.now().astimezone(self.zone_for(tenant_id)).replace(tzinfo=None)

    def today(self, tenant_id: Optional[int]) -> date:
        return self.now(tenant_id).date()


def parse_tenant_timezones(value: str) -> dict[int, str]:
    """Parse ``"1=Asia/Kolkata,2=UTC"`` into ``{1: "Asia/Kolkata", 2: "UTC"}``."""

    out: dict[int, str] = {}
    for chunk in (value or "").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        tenant, _, zone = chunk.partition("=")
        if not zone.strip():
            raise ValueError(f"Invalid tenant timezone entry: {chunk!r}")
        out[int(tenant.strip())] = zone.strip()
    return out
