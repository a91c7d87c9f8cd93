from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..shifts.model import ShiftDefinition
from .strategies.base import ShiftWindowStrategy
from .strategies.day_strategy import DayShiftStrategy
from .strategies.night_strategy import NightShiftStrategy


@dataclass
class ShiftWindowStrategyFactory:
    """Factory Pattern: choose how to anchor a shift based on its flags."""

    def for_shift(self, shift: Optional[ShiftDefinition]) -> ShiftWindowStrategy:
        if shift and (shift.is_night_shift or shift.crosses_midnight):
            return NightShiftStrategy()
        return DayShiftStrategy()
