from datetime import date, time
from decimal import Decimal

import pytest

from src.workforce_engine.workforce_engine.attendance.model import WorkLog
from src.workforce_engine.workforce_engine.core.enums import LeavePayType, WorkLogStatus
from src.workforce_engine.workforce_engine.core.exceptions import NotFoundError, ValidationError


def _log(container, day, status, **extra):
    return container.attendance_repo.put(
        WorkLog(log_id=None, employee_id=1, log_date=date(2025, 3, day), status=status, **extra)
    )


def test_monthly_summary_counts_working_dates_only(container, assign, day_shift):
    assign(day_shift)
    _log(container, 3, WorkLogStatus.PRESENT, total_hours=Decimal("8.00"))
    _log(container, 4, WorkLogStatus.LATE, total_hours=Decimal("7.50"), late_minutes=30)
    _log(container, 5, WorkLogStatus.ABSENT)
    _log(container, 6, WorkLogStatus.HALF_DAY, total_hours=Decimal("4.00"))
    # Saturday, outside the calendar.
    _log(container, 8, WorkLogStatus.PRESENT, total_hours=Decimal("6.00"), overtime_minutes=120)

    summary = container.monthly_aggregator.aggregate(employee_id=1, month=3, year=2025)

    assert summary.working_days == 21
    assert summary.present_days == 2
    assert summary.absent_days == 1
    assert summary.half_days == 1
    assert summary.late_days == 1
    assert summary.total_hours == Decimal("19.50")
    assert summary.total_late_minutes == 30
    assert summary.total_overtime_minutes == 0
    assert summary.no_show_days == 17
    assert summary.shift == day_shift
    assert (summary.month, summary.year) == (3, 2025)


def test_leave_days_are_clamped_and_counted_once(container):
    leaves = container.leaves_repo
    # Fri 28 Feb .. Tue 4 Mar: only Mon 3 and Tue 4 fall in March working days.
    leaves.add(employee_id=1, start_date=date(2025, 2, 28), end_date=date(2025, 3, 4))
    leaves.add(employee_id=1, start_date=date(2025, 3, 4), end_date=date(2025, 3, 5), pay_type=LeavePayType.UNPAID)

    summary = container.monthly_aggregator.aggregate(employee_id=1, month=3, year=2025)

    assert summary.leave_days == 3
    assert summary.unpaid_leave_days == 2
    assert summary.no_show_days == 18
    assert len(summary.leaves) == 2


def test_range_summary_validation(container):
    aggregator = container.monthly_aggregator

    with pytest.raises(ValidationError):
        aggregator.aggregate(employee_id=1, month=13, year=2025)
    with pytest.raises(ValidationError):
        aggregator.range_summary(employee_id=1, start=date(2025, 3, 31), end=date(2025, 3, 1))
    with pytest.raises(NotFoundError):
        aggregator.aggregate(employee_id=99, month=3, year=2025)


def test_summary_dict_can_leave_out_records(container):
    _log(container, 3, WorkLogStatus.PRESENT, clock_in=time(9, 0))

    body = container.monthly_aggregator.range_summary(
        employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 7)
    ).to_dict(include_records=False)

    assert body["working_days"] == 5
    assert body["present_days"] == 1
    assert "records" not in body
