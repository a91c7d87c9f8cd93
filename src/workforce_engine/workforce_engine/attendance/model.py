from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..core.enums import SessionState, WorkLogStatus
from ..leaves.model import LeaveRequest
from ..shifts.model import ShiftDefinition


def _fmt_time(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


@dataclass(frozen=True)
class GeoPoint:
    latitude: Decimal
    longitude: Decimal
    accuracy: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "latitude": str(self.latitude),
            "longitude": str(self.longitude),
            "accuracy": str(self.accuracy) if self.accuracy is not None else None,
        }


@dataclass(frozen=True)
class ClockContext:
    """Request metadata captured with a clock event."""

    ip_address: Optional[str] = None
    location: Optional[GeoPoint] = None
    author_id: Optional[int] = None


@dataclass(frozen=True)
class WorkLog:
    """Domain entity: one employee's attendance for one calendar day.

    ``log_date`` is the day the session started; a night shift's clock-out
    time-of-day belongs to the following morning.
    """

    log_id: Optional[int]
    employee_id: int
    log_date: date
    status: WorkLogStatus = WorkLogStatus.PRESENT
    clock_in: Optional[time] = None
    clock_out: Optional[time] = None
    total_hours: Optional[Decimal] = None
    late_minutes: int = 0
    early_leave_minutes: int = 0
    overtime_minutes: int = 0
    break_minutes: int = 0
    notes: Optional[str] = None
    clock_in_ip: Optional[str] = None
    clock_in_location: Optional[GeoPoint] = None
    clock_out_ip: Optional[str] = None
    clock_out_location: Optional[GeoPoint] = None
    tenant_id: Optional[int] = None
    author_id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    def clock_in_at(self) -> Optional[datetime]:
        return datetime.combine(self.log_date, self.clock_in) if self.clock_in else None

    def to_dict(self) -> dict:
        return {
            "id": self.log_id,
            "employee_id": self.employee_id,
            "log_date": self.log_date.isoformat(),
            "status": self.status.value,
            "clock_in": _fmt_time(self.clock_in),
            "clock_out": _fmt_time(self.clock_out),
            "total_hours": str(self.total_hours) if self.total_hours is not None else None,
            "late_minutes": self.late_minutes,
            "early_leave_minutes": self.early_leave_minutes,
            "overtime_minutes": self.overtime_minutes,
            "break_minutes": self.break_minutes,
            "notes": self.notes,
            "clock_in_ip": self.clock_in_ip,
            "clock_in_location": self.clock_in_location.to_dict() if self.clock_in_location else None,
            "clock_out_ip": self.clock_out_ip,
            "clock_out_location": self.clock_out_location.to_dict() if self.clock_out_location else None,
            "tenant_id": self.tenant_id,
            "author_id": self.author_id,
        }


@dataclass(frozen=True)
class CurrentStatus:
    state: SessionState
    current_time: datetime
    timezone: str
    log: Optional[WorkLog] = None
    shift: Optional[ShiftDefinition] = None
    leave: Optional[LeaveRequest] = None

    def to_dict(self) -> dict:
        out = {
            "status": self.state.value,
            "on_leave": self.state == SessionState.ON_LEAVE,
            "clock_in": None,
            "clock_out": None,
            "total_hours": None,
            "current_time": self.current_time.strftime("%H:%M:%S"),
            "timezone": self.timezone,
        }
        if self.leave:
            out["leave_details"] = self.leave.to_dict()
            return out

        out["shift"] = self.shift.to_dict() if self.shift else None
        if self.log:
            out.update(
                {
                    "log_date": self.log.log_date.isoformat(),
                    "clock_in": _fmt_time(self.log.clock_in),
                    "clock_out": _fmt_time(self.log.clock_out),
                    "total_hours": str(self.log.total_hours) if self.log.total_hours is not None else None,
                    "late_minutes": self.log.late_minutes,
                    "early_leave_minutes": self.log.early_leave_minutes,
                    "overtime_minutes": self.log.overtime_minutes,
                    "break_minutes": self.log.break_minutes,
                }
            )
        return out
