from datetime import date, time
from decimal import Decimal

import pytest

from src.workforce_engine.workforce_engine.attendance.model import WorkLog
from src.workforce_engine.workforce_engine.calendars.model import WeekdayFlags
from src.workforce_engine.workforce_engine.core.constants import AUTO_ABSENT_NOTE, SYSTEM_AUTHOR_ID
from src.workforce_engine.workforce_engine.core.enums import WorkLogStatus
from src.workforce_engine.workforce_engine.core.exceptions import NotFoundError, ValidationError
from src.workforce_engine.workforce_engine.employees.model import Employee

FRIDAY = date(2025, 3, 7)
SATURDAY = date(2025, 3, 8)


def _hire(container, employee_id, tenant_id=1):
    return container.employees_repo.add(
        Employee(employee_id=employee_id, tenant_id=tenant_id, full_name=f"Employee {employee_id}", base_salary=Decimal("1000"))
    )


def test_manual_entry_derives_figures_from_clock_times(container, assign, day_shift):
    assign(day_shift)

    log = container.attendance_service.record_attendance(
        employee_id=1,
        log_date=FRIDAY,
        fields={"status": "late", "clock_in": "09:15", "clock_out": "17:30", "author_id": 9},
    )

    assert log.log_id is not None
    assert log.status == WorkLogStatus.LATE
    assert log.late_minutes == 15
    assert log.early_leave_minutes == 30
    assert log.total_hours == Decimal("8.25")
    assert log.author_id == 9
    assert log.tenant_id == 1


def test_manual_entry_merges_with_stored_values(container, assign, day_shift):
    assign(day_shift)
    service = container.attendance_service
    first = service.record_attendance(
        employee_id=1, log_date=FRIDAY, fields={"clock_in": "09:00:00", "clock_out": "18:00:00"}
    )

    updated = service.record_attendance(employee_id=1, log_date=FRIDAY, fields={"notes": "Client visit"})

    assert updated.log_id == first.log_id
    assert updated.clock_in == time(9, 0)
    assert updated.clock_out == time(18, 0)
    assert updated.total_hours == Decimal("9.00")
    assert updated.notes == "Client visit"


def test_clearing_clock_out_drops_derived_figures(container, assign, day_shift):
    assign(day_shift)
    service = container.attendance_service
    service.record_attendance(employee_id=1, log_date=FRIDAY, fields={"clock_in": "09:10", "clock_out": "18:30"})

    reopened = service.record_attendance(employee_id=1, log_date=FRIDAY, fields={"clock_out": None})

    assert reopened.is_open
    assert reopened.total_hours is None
    assert reopened.overtime_minutes == 0
    assert reopened.early_leave_minutes == 0
    assert reopened.late_minutes == 10


def test_manual_entry_without_clock_times_keeps_given_figures(container):
    log = container.attendance_service.record_attendance(
        employee_id=1, log_date=FRIDAY, fields={"status": "half_day", "total_hours": "4"}
    )

    assert log.status == WorkLogStatus.HALF_DAY
    assert log.total_hours == Decimal("4")
    assert log.clock_in is None


@pytest.mark.parametrize(
    "fields",
    [
        {"status": "sleeping"},
        {"clock_in": "9 o'clock"},
        {"late_minutes": -1},
        {"total_hours": "lots"},
        {"favourite_colour": "blue"},
    ],
)
def test_manual_entry_rejects_invalid_fields(container, fields):
    with pytest.raises(ValidationError):
        container.attendance_service.record_attendance(employee_id=1, log_date=FRIDAY, fields=fields)


def test_bulk_entry_collects_per_record_errors(container):
    _hire(container, 2)

    outcome = container.attendance_service.bulk_record_attendance(
        [
            {"employee_id": 1, "log_date": "2025-03-07", "status": "present"},
            {"employee_id": 2, "log_date": "2025-03-07", "status": "absent"},
            {"employee_id": 3, "log_date": "2025-03-07", "status": "present"},
            {"employee_id": 1},
        ]
    )

    assert outcome.count == 2
    assert [e.key["index"] for e in outcome.errors] == [2, 3]
    assert outcome.to_dict()["errors"][0]["message"] == "Employee not found"
    assert container.attendance_repo.get_for_day(employee_id=2, log_date=FRIDAY).status == WorkLogStatus.ABSENT


def test_list_and_delete_work_logs(container):
    service = container.attendance_service
    log = service.record_attendance(employee_id=1, log_date=FRIDAY, fields={"status": "present"})

    assert service.list_work_logs(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 31)) == [log]

    service.delete_work_log(log.log_id)
    assert service.list_work_logs(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 31)) == []
    with pytest.raises(NotFoundError):
        service.delete_work_log(log.log_id)


def test_sync_marks_employees_on_leave(container):
    container.leaves_repo.add(
        employee_id=1, start_date=date(2025, 3, 6), end_date=date(2025, 3, 7), reason="Wedding", approved_by=5
    )

    assert container.attendance_service.sync_with_approved_leaves(on_date=FRIDAY) == 1

    log = container.attendance_repo.get_for_day(employee_id=1, log_date=FRIDAY)
    assert log.status == WorkLogStatus.ON_LEAVE
    assert log.notes == "On approved leave: Annual Leave - Wedding"
    assert log.author_id == 5
    assert log.tenant_id == 1


def test_sync_is_scoped_to_tenant(container):
    container.leaves_repo.add(employee_id=1, start_date=FRIDAY, end_date=FRIDAY)

    assert container.attendance_service.sync_with_approved_leaves(on_date=FRIDAY, tenant_id=2) == 0
    assert container.attendance_repo.get_for_day(employee_id=1, log_date=FRIDAY) is None


def test_auto_mark_absent_only_touches_missing_attendance(container):
    for employee_id in (2, 3, 4):
        _hire(container, employee_id)
    repo = container.attendance_repo
    repo.put(WorkLog(log_id=None, employee_id=2, log_date=FRIDAY, status=WorkLogStatus.PRESENT, clock_in=time(9, 0)))
    repo.put(WorkLog(log_id=None, employee_id=4, log_date=FRIDAY, status=WorkLogStatus.HALF_DAY))
    container.leaves_repo.add(employee_id=3, start_date=FRIDAY, end_date=FRIDAY)

    marked = container.attendance_service.auto_mark_absent(on_date=FRIDAY)

    assert marked == 1
    absent = repo.get_for_day(employee_id=1, log_date=FRIDAY)
    assert absent.status == WorkLogStatus.ABSENT
    assert absent.notes == AUTO_ABSENT_NOTE
    assert absent.author_id == SYSTEM_AUTHOR_ID
    assert repo.get_for_day(employee_id=2, log_date=FRIDAY).status == WorkLogStatus.PRESENT
    assert repo.get_for_day(employee_id=3, log_date=FRIDAY) is None
    assert repo.get_for_day(employee_id=4, log_date=FRIDAY).status == WorkLogStatus.HALF_DAY


def test_auto_mark_absent_skips_non_working_days(container):
    assert container.attendance_service.auto_mark_absent(on_date=SATURDAY) == 0
    assert container.attendance_repo.get_for_day(employee_id=1, log_date=SATURDAY) is None


def test_auto_mark_absent_follows_tenant_calendar(container):
    container.calendar_service.create_configuration(
        tenant_id=1, flags=WeekdayFlags(saturday=True), valid_from=date(2025, 1, 1)
    )

    assert container.attendance_service.auto_mark_absent(on_date=SATURDAY) == 1
