from datetime import date

import pytest

from src.workforce_engine.workforce_engine.calendars.model import WeekdayFlags
from src.workforce_engine.workforce_engine.core.enums import Weekday
from src.workforce_engine.workforce_engine.core.exceptions import (
    NotFoundError,
    OpenRecordExistsError,
    OverlapConflictError,
    ValidationError,
)

SIX_DAY_WEEK = WeekdayFlags(saturday=True)


def test_default_configuration_is_monday_to_friday(container):
    service = container.calendar_service

    config = service.active_configuration(tenant_id=1, on_date=date(2025, 3, 8))
    assert config.is_default
    assert config.flags.working_weekdays() == {
        Weekday.MONDAY,
        Weekday.TUESDAY,
        Weekday.WEDNESDAY,
        Weekday.THURSDAY,
        Weekday.FRIDAY,
    }
    # March 2025 has 21 weekdays.
    assert service.count_working_days(tenant_id=1, start=date(2025, 3, 1), end=date(2025, 3, 31)) == 21
    assert service.is_working_day(tenant_id=1, on_date=date(2025, 3, 8)) is False


def test_resolve_working_days_splits_dates(container):
    days = container.calendar_service.resolve_working_days(tenant_id=1, start=date(2025, 3, 7), end=date(2025, 3, 10))

    assert days.working_dates == (date(2025, 3, 7), date(2025, 3, 10))
    assert days.non_working_dates == (date(2025, 3, 8), date(2025, 3, 9))
    assert days.to_dict()["total_days"] == 4


def test_resolve_working_days_rejects_reversed_range(container):
    with pytest.raises(ValidationError):
        container.calendar_service.resolve_working_days(tenant_id=1, start=date(2025, 3, 10), end=date(2025, 3, 1))


def test_configuration_in_force_is_used(container):
    service = container.calendar_service
    service.create_configuration(tenant_id=1, flags=SIX_DAY_WEEK, valid_from=date(2025, 1, 1))

    assert service.is_working_day(tenant_id=1, on_date=date(2025, 3, 8)) is True
    assert service.count_working_days(tenant_id=1, start=date(2025, 3, 1), end=date(2025, 3, 31)) == 26
    # Before the configuration starts the default applies.
    assert service.is_working_day(tenant_id=1, on_date=date(2024, 12, 28)) is False
    # Other tenants are unaffected.
    assert service.is_working_day(tenant_id=2, on_date=date(2025, 3, 8)) is False


def test_second_open_ended_configuration_is_rejected(container):
    service = container.calendar_service
    first = service.create_configuration(tenant_id=1, flags=SIX_DAY_WEEK, valid_from=date(2025, 1, 1))

    with pytest.raises(OpenRecordExistsError) as err:
        service.create_configuration(tenant_id=1, flags=WeekdayFlags(), valid_from=date(2026, 1, 1))
    assert err.value.existing == first


def test_overlapping_configuration_is_rejected(container):
    service = container.calendar_service
    first = service.create_configuration(
        tenant_id=1, flags=SIX_DAY_WEEK, valid_from=date(2025, 1, 1), valid_to=date(2025, 6, 30)
    )

    with pytest.raises(OverlapConflictError) as err:
        service.create_configuration(
            tenant_id=1, flags=WeekdayFlags(), valid_from=date(2025, 6, 30), valid_to=date(2025, 12, 31)
        )
    assert err.value.existing == first

    adjacent = service.create_configuration(
        tenant_id=1, flags=WeekdayFlags(), valid_from=date(2025, 7, 1), valid_to=date(2025, 12, 31)
    )
    assert adjacent.config_id != first.config_id


def test_create_rejects_end_before_start(container):
    with pytest.raises(ValidationError):
        container.calendar_service.create_configuration(
            tenant_id=1, flags=WeekdayFlags(), valid_from=date(2025, 2, 1), valid_to=date(2025, 1, 1)
        )


def test_update_ignores_its_own_range(container):
    service = container.calendar_service
    config = service.create_configuration(tenant_id=1, flags=WeekdayFlags(), valid_from=date(2025, 1, 1))

    updated = service.update_configuration(config.config_id, tenant_id=1, flags=SIX_DAY_WEEK)

    assert updated.config_id == config.config_id
    assert updated.flags.saturday is True
    assert updated.valid_from == date(2025, 1, 1)
    assert updated.valid_to is None


def test_update_open_ended_blocked_by_other_open_record(container):
    service = container.calendar_service
    closed = service.create_configuration(
        tenant_id=1, flags=WeekdayFlags(), valid_from=date(2024, 1, 1), valid_to=date(2024, 12, 31)
    )
    service.create_configuration(tenant_id=1, flags=SIX_DAY_WEEK, valid_from=date(2025, 1, 1))

    with pytest.raises(OpenRecordExistsError):
        service.update_configuration(closed.config_id, tenant_id=1, valid_to=None)

    shortened = service.update_configuration(closed.config_id, tenant_id=1, valid_to=date(2024, 6, 30))
    assert shortened.valid_to == date(2024, 6, 30)


def test_update_and_delete_unknown_configuration(container):
    service = container.calendar_service

    with pytest.raises(NotFoundError):
        service.update_configuration(99, tenant_id=1, flags=WeekdayFlags())
    with pytest.raises(NotFoundError):
        service.delete_configuration(99, tenant_id=1)


def test_flags_from_mapping_keeps_unlisted_days():
    flags = WeekdayFlags.from_mapping({"saturday": True, "monday": False})

    assert flags.saturday is True
    assert flags.monday is False
    assert flags.tuesday is True
    assert flags.sunday is False


def test_other_tenant_cannot_read_or_delete_configuration(container):
    service = container.calendar_service
    owned = service.create_configuration(tenant_id=1, flags=SIX_DAY_WEEK, valid_from=date(2025, 1, 1))

    with pytest.raises(NotFoundError):
        service.get_configuration(owned.config_id, tenant_id=2)
    with pytest.raises(NotFoundError):
        service.delete_configuration(owned.config_id, tenant_id=2)

    assert service.get_configuration(owned.config_id, tenant_id=1) == owned
    service.delete_configuration(owned.config_id, tenant_id=1)
    assert service.list_configurations(tenant_id=1) == []
