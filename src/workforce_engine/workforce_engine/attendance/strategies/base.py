from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ...shifts.model import ShiftDefinition


@dataclass(frozen=True)
class ShiftWindow:
    """A shift anchored to concrete datetimes for one log date."""

    start: datetime
    end: datetime


def next_day_if_before(anchor: datetime, value: datetime) -> datetime:
    return value + timedelta(days=1) if value < anchor else value


class ShiftWindowStrategy(ABC):
    """Strategy Pattern: encapsulate how a shift's times map onto a work day."""

    spans_midnight: bool = False

    @abstractmethod
    def window(self, shift: ShiftDefinition, log_date: date) -> ShiftWindow:
        raise NotImplementedError

    def clock_out_at(self, log_date: date, clock_in: time, clock_out: time) -> datetime:
        """Anchor a clock-out time-of-day to the session that started on ``log_date``.

        A clock-out earlier than the clock-in can only be the next morning.
        """

        return next_day_if_before(datetime.combine(log_date, clock_in), datetime.combine(log_date, clock_out))
