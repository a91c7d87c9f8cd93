from __future__ import annotations

from enum import Enum


class Weekday(str, Enum):
    """Day of week, ordered like date.weekday()."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def ordered(cls) -> tuple["Weekday", ...]:
        return tuple(cls)

    @classmethod
    def of(cls, value) -> "Weekday":
        return cls.ordered()[value.weekday()]


class WorkLogStatus(str, Enum):
    """Stored attendance classification of one employee-day."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    ON_LEAVE = "on_leave"
    HOLIDAY = "holiday"


class SessionState(str, Enum):
    """What get_current_status reports for today."""

    ON_LEAVE = "on_leave"
    NOT_CLOCKED_IN = "not_clocked_in"
    CLOCKED_IN = "clocked_in"
    CLOCKED_OUT = "clocked_out"


class RequestStatus(str, Enum):
    """Approval state of a leave request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeavePayType(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"


class LineItemKind(str, Enum):
    BENEFIT = "benefit"
    DEDUCTION = "deduction"
    LOP = "lop"


class SlipStatus(str, Enum):
    GENERATED = "generated"
    PAID = "paid"
