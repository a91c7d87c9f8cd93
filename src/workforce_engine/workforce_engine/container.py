from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.factory import ShiftWindowStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .calendars.mysql_calendar_repository import MySQLCalendarRepository
from .calendars.repository import CalendarRepository
from .calendars.service import CalendarService
from .common.clock import Clock, SystemClock, TenantClock
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .payroll.mysql_payroll_repository import MySQLRecurringItemRepository, MySQLSalarySlipRepository
from .payroll.repository import RecurringItemRepository, SalarySlipRepository
from .payroll.service import PayrollService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService
from .summaries.service import MonthlyAggregator


@dataclass(frozen=True)
class Container:
    tenant_clock: TenantClock

    employees_repo: EmployeeRepository
    leaves_repo: LeaveRepository
    calendars_repo: CalendarRepository
    shifts_repo: ShiftRepository
    attendance_repo: AttendanceRepository
    slips_repo: SalarySlipRepository
    recurring_items_repo: RecurringItemRepository

    calendar_service: CalendarService
    shift_service: ShiftService
    attendance_service: AttendanceService
    monthly_aggregator: MonthlyAggregator
    payroll_service: PayrollService

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    tenant_clock: TenantClock,
    employees: EmployeeRepository,
    leaves: LeaveRepository,
    calendars: CalendarRepository,
    shifts: ShiftRepository,
    attendance: AttendanceRepository,
    slips: SalarySlipRepository,
    recurring_items: RecurringItemRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    calendar_service = CalendarService(calendars)
    shift_service = ShiftService(shifts, employees)
    attendance_service = AttendanceService(
        attendance,
        employees,
        leaves,
        shift_service,
        calendar_service,
        clock=tenant_clock,
        strategy_factory=ShiftWindowStrategyFactory(),
    )
    monthly_aggregator = MonthlyAggregator(attendance, employees, leaves, calendar_service, shift_service)
    payroll_service = PayrollService(slips, recurring_items, employees, monthly_aggregator, clock=tenant_clock)

    return Container(
        tenant_clock=tenant_clock,
        employees_repo=employees,
        leaves_repo=leaves,
        calendars_repo=calendars,
        shifts_repo=shifts,
        attendance_repo=attendance,
        slips_repo=slips,
        recurring_items_repo=recurring_items,
        calendar_service=calendar_service,
        shift_service=shift_service,
        attendance_service=attendance_service,
        monthly_aggregator=monthly_aggregator,
        payroll_service=payroll_service,
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    default_timezone: str = "UTC",
    tenant_timezones: Optional[Mapping[int, str]] = None,
    clock: Optional[Clock] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        tenant_clock=TenantClock(
            clock=clock or SystemClock(),
            default_timezone=default_timezone,
            overrides=dict(tenant_timezones or {}),
        ),
        employees=MySQLEmployeeRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        calendars=MySQLCalendarRepository(conn),
        shifts=MySQLShiftRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        slips=MySQLSalarySlipRepository(conn),
        recurring_items=MySQLRecurringItemRepository(conn),
        conn=conn,
    )
