from datetime import date, datetime, time
from decimal import Decimal

from src.workforce_engine.workforce_engine.attendance.factory import ShiftWindowStrategyFactory
from src.workforce_engine.workforce_engine.attendance.metrics import session_metrics, worked_hours
from src.workforce_engine.workforce_engine.attendance.strategies.day_strategy import DayShiftStrategy
from src.workforce_engine.workforce_engine.attendance.strategies.night_strategy import NightShiftStrategy
from src.workforce_engine.workforce_engine.shifts.model import ShiftDefinition


def test_factory_picks_day_strategy_for_regular_shift():
    shift = ShiftDefinition(shift_id=1, shift_name="Morning", start_time=time(8, 0), end_time=time(17, 0))

    strategy = ShiftWindowStrategyFactory().for_shift(shift)

    assert isinstance(strategy, DayShiftStrategy)
    window = strategy.window(shift, date(2025, 1, 1))
    assert window.start == datetime(2025, 1, 1, 8, 0)
    assert window.end == datetime(2025, 1, 1, 17, 0)


def test_factory_picks_night_strategy_when_end_wraps():
    # Flag left unset: wrapping times alone make it a night shift.
    shift = ShiftDefinition(shift_id=2, shift_name="Graveyard", start_time=time(23, 0), end_time=time(7, 0))

    strategy = ShiftWindowStrategyFactory().for_shift(shift)

    assert isinstance(strategy, NightShiftStrategy)
    window = strategy.window(shift, date(2025, 12, 31))
    assert window.end == datetime(2026, 1, 1, 7, 0)


def test_factory_without_shift_falls_back_to_day_strategy():
    assert isinstance(ShiftWindowStrategyFactory().for_shift(None), DayShiftStrategy)


def test_clock_out_before_clock_in_rolls_to_next_day():
    at = DayShiftStrategy().clock_out_at(date(2025, 1, 1), time(22, 0), time(2, 30))

    assert at == datetime(2025, 1, 2, 2, 30)


def test_overtime_threshold_counts_net_hours_beyond_it():
    shift = ShiftDefinition(
        shift_id=3,
        shift_name="Flexible",
        start_time=time(9, 0),
        end_time=time(17, 0),
        overtime_after_hours=Decimal("8"),
    )
    window = DayShiftStrategy().window(shift, date(2025, 1, 1))

    metrics = session_metrics(
        started_at=datetime(2025, 1, 1, 9, 30),
        ended_at=datetime(2025, 1, 1, 18, 0),
        break_minutes=0,
        shift=shift,
        window=window,
    )

    assert metrics.late_minutes == 30
    assert metrics.overtime_minutes == 30
    assert metrics.total_hours == Decimal("8.50")


def test_worked_hours_never_negative():
    assert worked_hours(20, 60) == Decimal("0.00")
