from datetime import date, time
from decimal import Decimal

import pytest

from src.workforce_engine.workforce_engine.core.exceptions import NotFoundError, ValidationError
from src.workforce_engine.workforce_engine.employees.model import Employee


def test_create_shift_forces_night_flag_when_end_before_start(container):
    shift = container.shift_service.create_shift(
        shift_name="Late Night", start_time=time(22, 0), end_time=time(6, 0)
    )

    assert shift.is_night_shift is True
    assert shift.crosses_midnight is True
    assert shift.overtime_after_hours == Decimal("0")


def test_create_shift_validates_fields(container):
    with pytest.raises(ValidationError):
        container.shift_service.create_shift(shift_name="  ", start_time=time(9, 0), end_time=time(17, 0))
    with pytest.raises(ValidationError):
        container.shift_service.create_shift(
            shift_name="Day", start_time=time(9, 0), end_time=time(17, 0), break_minutes=-5
        )


def test_update_shift_rederives_night_flag(container):
    service = container.shift_service
    shift = service.create_shift(shift_name="Night", start_time=time(22, 0), end_time=time(6, 0))

    moved = service.update_shift(shift.shift_id, start_time=time(8, 0), end_time=time(16, 0))

    assert moved.is_night_shift is False
    assert moved.shift_name == "Night"
    assert service.get_shift(shift.shift_id) == moved


def test_assign_upserts_per_shift_and_employee(container, day_shift):
    container.shifts_repo.add(day_shift)
    service = container.shift_service

    first = service.assign(shift_id=day_shift.shift_id, employee_ids=1, effective_from=date(2025, 1, 1))
    second = service.assign(
        shift_id=day_shift.shift_id,
        employee_ids=[1],
        effective_from=date(2025, 2, 1),
        effective_to=date(2025, 12, 31),
    )

    assert first[0].assignment_id == second[0].assignment_id
    assert second[0].effective_from == date(2025, 2, 1)
    assert service.resolve_shift(employee_id=1, on_date=date(2025, 1, 15)) is None
    assert service.resolve_shift(employee_id=1, on_date=date(2025, 3, 3)) == day_shift


def test_assign_rejects_unknown_shift_and_employee(container, day_shift):
    service = container.shift_service

    with pytest.raises(NotFoundError):
        service.assign(shift_id=42, employee_ids=[1], effective_from=date(2025, 1, 1))

    container.shifts_repo.add(day_shift)
    with pytest.raises(NotFoundError):
        service.assign(shift_id=day_shift.shift_id, employee_ids=[1, 7], effective_from=date(2025, 1, 1))
    with pytest.raises(ValidationError):
        service.assign(shift_id=day_shift.shift_id, employee_ids=[], effective_from=date(2025, 1, 1))
    with pytest.raises(ValidationError):
        service.assign(
            shift_id=day_shift.shift_id,
            employee_ids=[1],
            effective_from=date(2025, 2, 1),
            effective_to=date(2025, 1, 1),
        )


def test_earliest_assignment_in_force_wins(container, day_shift, night_shift):
    container.shifts_repo.add(day_shift)
    container.shifts_repo.add(night_shift)
    container.employees_repo.add(
        Employee(employee_id=2, tenant_id=1, full_name="Ben Ode", base_salary=Decimal("2000"))
    )
    service = container.shift_service

    service.assign(shift_id=night_shift.shift_id, employee_ids=[2], effective_from=date(2025, 3, 1))
    service.assign(shift_id=day_shift.shift_id, employee_ids=[2], effective_from=date(2025, 1, 1))

    assert service.resolve_shift(employee_id=2, on_date=date(2025, 3, 10)) == day_shift
    schedule = service.schedule_for(employee_id=2, start=date(2025, 3, 1), end=date(2025, 3, 31))
    assert [a.shift_id for a in schedule] == [day_shift.shift_id, night_shift.shift_id]


def test_roster_lists_assignments_in_force_for_tenant(container, day_shift, night_shift):
    container.shifts_repo.add(day_shift)
    container.shifts_repo.add(night_shift)
    container.employees_repo.add(
        Employee(employee_id=2, tenant_id=1, full_name="Ben Ode", base_salary=Decimal("2000"))
    )
    container.employees_repo.add(
        Employee(employee_id=3, tenant_id=2, full_name="Cyd Lam", base_salary=Decimal("2000"))
    )
    service = container.shift_service
    service.assign(shift_id=night_shift.shift_id, employee_ids=[2], effective_from=date(2025, 3, 1))
    service.assign(shift_id=day_shift.shift_id, employee_ids=[1, 3], effective_from=date(2025, 1, 1))
    service.assign(
        shift_id=night_shift.shift_id,
        employee_ids=[1],
        effective_from=date(2024, 1, 1),
        effective_to=date(2024, 12, 31),
    )

    roster = service.roster(on_date=date(2025, 3, 10), tenant_id=1)
    assert [(a.employee_id, a.shift_id) for a in roster] == [(1, day_shift.shift_id), (2, night_shift.shift_id)]

    everyone = service.roster(on_date=date(2025, 3, 10))
    assert [a.employee_id for a in everyone] == [1, 2, 3]
    assert service.roster(on_date=date(2025, 2, 1), tenant_id=1)[0].shift_name == "General"


def test_delete_assignment_unassigns_the_shift(container, day_shift):
    container.shifts_repo.add(day_shift)
    service = container.shift_service
    [assignment] = service.assign(shift_id=day_shift.shift_id, employee_ids=[1], effective_from=date(2025, 1, 1))

    service.delete_assignment(assignment.assignment_id)

    assert service.resolve_shift(employee_id=1, on_date=date(2025, 3, 10)) is None
    with pytest.raises(NotFoundError):
        service.delete_assignment(assignment.assignment_id)
