from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

import pytest

from src.workforce_engine.workforce_engine.attendance.model import WorkLog
from src.workforce_engine.workforce_engine.calendars.model import CalendarConfiguration, CalendarDraft
from src.workforce_engine.workforce_engine.common.clock import FixedClock, TenantClock
from src.workforce_engine.workforce_engine.common.dates import ranges_overlap
from src.workforce_engine.workforce_engine.container import assemble
from src.workforce_engine.workforce_engine.core.enums import LeavePayType, LineItemKind, RequestStatus, SlipStatus
from src.workforce_engine.workforce_engine.employees.model import Employee
from src.workforce_engine.workforce_engine.leaves.model import LeaveRequest
from src.workforce_engine.workforce_engine.payroll.model import RecurringItem, SalarySlip
from src.workforce_engine.workforce_engine.shifts.model import ShiftAssignment, ShiftDefinition


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self.by_id = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> Employee:
        self.by_id[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(int(employee_id))

    def list_active(self, *, tenant_id=None, employee_ids=None):
        wanted = {int(i) for i in employee_ids} if employee_ids is not None else None
        return [
            e
            for e in sorted(self.by_id.values(), key=lambda e: e.employee_id)
            if e.is_active
            and (tenant_id is None or e.tenant_id == tenant_id)
            and (wanted is None or e.employee_id in wanted)
        ]


class InMemoryLeaves:
    def __init__(self):
        self.requests: list[LeaveRequest] = []

    def add(self, **fields) -> LeaveRequest:
        fields.setdefault("request_id", len(self.requests) + 1)
        fields.setdefault("category", "Annual Leave")
        fields.setdefault("pay_type", LeavePayType.PAID)
        fields.setdefault("status", RequestStatus.APPROVED)
        leave = LeaveRequest(**fields)
        self.requests.append(leave)
        return leave

    def _approved(self):
        return [r for r in self.requests if r.status == RequestStatus.APPROVED]

    def list_approved_overlapping(self, *, employee_id, start, end):
        return [
            r for r in self._approved() if r.employee_id == employee_id and r.start_date <= end and r.end_date >= start
        ]

    def get_approved_covering(self, *, employee_id, on_date):
        return next((r for r in self._approved() if r.employee_id == employee_id and r.covers(on_date)), None)

    def list_approved_covering(self, *, on_date):
        return [r for r in self._approved() if r.covers(on_date)]


class _CalendarScope:
    def __init__(self, repo: "InMemoryCalendars", tenant_id: int):
        self._repo = repo
        self._tenant_id = tenant_id
        self.existing = repo.list_for_tenant(tenant_id)

    def insert(self, draft: CalendarDraft) -> CalendarConfiguration:
        self._repo.next_id += 1
        config = CalendarConfiguration(config_id=self._repo.next_id, tenant_id=self._tenant_id, **draft.__dict__)
        self._repo.configs[config.config_id] = config
        return config

    def update(self, config_id: int, draft: CalendarDraft) -> CalendarConfiguration:
        config = CalendarConfiguration(config_id=config_id, tenant_id=self._tenant_id, **draft.__dict__)
        self._repo.configs[config_id] = config
        return config


class InMemoryCalendars:
    def __init__(self):
        self.configs: dict[int, CalendarConfiguration] = {}
        self.next_id = 0
        self._lock = threading.Lock()

    def get_by_id(self, config_id, *, tenant_id):
        config = self.configs.get(int(config_id))
        return config if config and config.tenant_id == tenant_id else None

    def list_for_tenant(self, tenant_id):
        items = [c for c in self.configs.values() if c.tenant_id == tenant_id]
        return sorted(items, key=lambda c: (c.valid_from is not None, c.valid_from or date.min, c.config_id))

    def find_overlapping(self, *, tenant_id, start, end):
        return next(
            (c for c in self.list_for_tenant(tenant_id) if ranges_overlap(c.valid_from, c.valid_to, start, end)),
            None,
        )

    @contextmanager
    def locked(self, tenant_id):
        with self._lock:
            yield _CalendarScope(self, tenant_id)

    def delete(self, config_id, *, tenant_id):
        if not self.get_by_id(config_id, tenant_id=tenant_id):
            return False
        del self.configs[int(config_id)]
        return True


class InMemoryShifts:
    def __init__(self):
        self.shifts: dict[int, ShiftDefinition] = {}
        self.assignments: dict[tuple[int, int], ShiftAssignment] = {}
        self._next_assignment = 0

    def add(self, shift: ShiftDefinition) -> ShiftDefinition:
        self.shifts[shift.shift_id] = shift
        return shift

    def list_all(self):
        return [self.shifts[k] for k in sorted(self.shifts)]

    def get_by_id(self, shift_id):
        return self.shifts.get(int(shift_id))

    def create(self, draft):
        shift = ShiftDefinition(shift_id=max(self.shifts, default=0) + 1, **draft.__dict__)
        self.shifts[shift.shift_id] = shift
        return shift

    def update(self, shift_id, draft):
        if int(shift_id) not in self.shifts:
            return False
        self.shifts[int(shift_id)] = ShiftDefinition(shift_id=int(shift_id), **draft.__dict__)
        return True

    def delete(self, shift_id):
        return self.shifts.pop(int(shift_id), None) is not None

    def _in_force(self, employee_id, start, end):
        items = [
            a
            for a in self.assignments.values()
            if a.employee_id == employee_id and ranges_overlap(a.effective_from, a.effective_to, start, end)
        ]
        return sorted(items, key=lambda a: (a.effective_from, a.assignment_id))

    def find_for_employee(self, *, employee_id, on_date):
        found = self._in_force(employee_id, on_date, on_date)
        return self.shifts.get(found[0].shift_id) if found else None

    def upsert_assignment(self, *, shift_id, employee_id, effective_from, effective_to):
        key = (shift_id, employee_id)
        current = self.assignments.get(key)
        if current is None:
            self._next_assignment += 1
            assignment_id = self._next_assignment
        else:
            assignment_id = current.assignment_id
        self.assignments[key] = ShiftAssignment(
            assignment_id=assignment_id,
            shift_id=shift_id,
            employee_id=employee_id,
            effective_from=effective_from,
            effective_to=effective_to,
            shift_name=self.shifts[shift_id].shift_name,
        )
        return self.assignments[key]

    def list_assignments(self, *, employee_id, start, end):
        return self._in_force(employee_id, start, end)

    def delete_assignment(self, assignment_id):
        key = next((k for k, a in self.assignments.items() if a.assignment_id == int(assignment_id)), None)
        return self.assignments.pop(key, None) is not None

    def list_in_force(self, *, on_date):
        items = [
            a for a in self.assignments.values() if ranges_overlap(a.effective_from, a.effective_to, on_date, on_date)
        ]
        return sorted(items, key=lambda a: (a.employee_id, a.effective_from, a.assignment_id))


class _WorkLogScope:
    def __init__(self, repo: "InMemoryAttendance", record: Optional[WorkLog]):
        self._repo = repo
        self.record = record

    def save(self, log: WorkLog) -> WorkLog:
        if log.log_id is None:
            self._repo.next_id += 1
            log = replace(log, log_id=self._repo.next_id)
        self._repo.logs[(log.employee_id, log.log_date)] = log
        self.record = log
        return log


class InMemoryAttendance:
    def __init__(self):
        self.logs: dict[tuple[int, date], WorkLog] = {}
        self.next_id = 0
        self._lock = threading.Lock()

    def put(self, log: WorkLog) -> WorkLog:
        return _WorkLogScope(self, None).save(log)

    def get_by_id(self, log_id):
        return next((log for log in self.logs.values() if log.log_id == int(log_id)), None)

    def get_for_day(self, *, employee_id, log_date):
        return self.logs.get((employee_id, log_date))

    @contextmanager
    def locked_day(self, *, employee_id, log_date):
        with self._lock:
            yield _WorkLogScope(self, self.logs.get((employee_id, log_date)))

    def list_for_employee(self, *, employee_id, start, end):
        items = [log for (emp, d), log in self.logs.items() if emp == employee_id and start <= d <= end]
        return sorted(items, key=lambda log: log.log_date)

    def list_for_date(self, *, on_date, employee_ids=None):
        wanted = {int(i) for i in employee_ids} if employee_ids is not None else None
        return [log for (emp, d), log in self.logs.items() if d == on_date and (wanted is None or emp in wanted)]

    def delete(self, log_id):
        log = self.get_by_id(log_id)
        if not log:
            return False
        del self.logs[(log.employee_id, log.log_date)]
        return True


class InMemorySlips:
    def __init__(self, employees: InMemoryEmployees):
        self.slips: dict[int, SalarySlip] = {}
        self._employees = employees

    def get_by_id(self, slip_id):
        return self.slips.get(int(slip_id))

    def find_for_period(self, *, employee_id, salary_period):
        return next(
            (s for s in self.slips.values() if s.employee_id == employee_id and s.salary_period == salary_period),
            None,
        )

    def insert_if_absent(self, computation, *, generated_at):
        existing = self.find_for_period(employee_id=computation.employee_id, salary_period=computation.salary_period)
        if existing:
            return existing
        slip = SalarySlip(
            slip_id=len(self.slips) + 1,
            employee_id=computation.employee_id,
            salary_period=computation.salary_period,
            basic_salary=computation.basic_salary,
            earnings=computation.earnings,
            deductions=computation.deductions,
            total_earnings=computation.total_earnings,
            total_deductions=computation.total_deductions,
            net_payable=computation.net_payable,
            status=SlipStatus.GENERATED,
            generated_at=generated_at,
        )
        self.slips[slip.slip_id] = slip
        return slip

    def replace_figures(self, slip_id, computation, *, generated_at):
        slip = self.slips.get(int(slip_id))
        if not slip or slip.status != SlipStatus.GENERATED:
            return False
        self.slips[slip.slip_id] = replace(
            slip,
            basic_salary=computation.basic_salary,
            earnings=computation.earnings,
            deductions=computation.deductions,
            total_earnings=computation.total_earnings,
            total_deductions=computation.total_deductions,
            net_payable=computation.net_payable,
            generated_at=generated_at,
        )
        return True

    def mark_paid(self, slip_ids, payment, *, paid_at):
        count = 0
        for slip_id in slip_ids:
            slip = self.slips.get(int(slip_id))
            if slip and slip.status == SlipStatus.GENERATED:
                self.slips[slip.slip_id] = replace(
                    slip,
                    status=SlipStatus.PAID,
                    paid_at=paid_at,
                    payment_method=payment.method,
                    payment_reference=payment.reference,
                )
                count += 1
        return count

    def list_for_period(self, *, salary_period, tenant_id=None):
        return [
            s
            for s in self.slips.values()
            if s.salary_period == salary_period
            and (tenant_id is None or self._employees.get_by_id(s.employee_id).tenant_id == tenant_id)
        ]

    def history(self, *, employee_id, limit):
        items = [s for s in self.slips.values() if s.employee_id == employee_id]
        return sorted(items, key=lambda s: s.salary_period, reverse=True)[:limit]


class InMemoryRecurringItems:
    def __init__(self):
        self.items: list[RecurringItem] = []

    def add(self, employee_id: int, kind: LineItemKind, title: str, amount: str) -> RecurringItem:
        item = RecurringItem(
            item_id=len(self.items) + 1,
            employee_id=employee_id,
            kind=kind,
            title=title,
            amount=Decimal(amount),
        )
        self.items.append(item)
        return item

    def list_active(self, employee_id):
        return [i for i in self.items if i.employee_id == employee_id]


@pytest.fixture
def fixed_now() -> datetime:
    # Monday
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def employee() -> Employee:
    return Employee(employee_id=1, tenant_id=1, full_name="Asha Rao", base_salary=Decimal("3000.00"))


@pytest.fixture
def day_shift() -> ShiftDefinition:
    return ShiftDefinition(shift_id=1, shift_name="General", start_time=time(9, 0), end_time=time(18, 0))


@pytest.fixture
def night_shift() -> ShiftDefinition:
    return ShiftDefinition(
        shift_id=2,
        shift_name="Night",
        start_time=time(22, 0),
        end_time=time(6, 0),
        is_night_shift=True,
    )


@pytest.fixture
def container(clock, employee):
    employees = InMemoryEmployees(employee)
    return assemble(
        tenant_clock=TenantClock(clock=clock),
        employees=employees,
        leaves=InMemoryLeaves(),
        calendars=InMemoryCalendars(),
        shifts=InMemoryShifts(),
        attendance=InMemoryAttendance(),
        slips=InMemorySlips(employees),
        recurring_items=InMemoryRecurringItems(),
    )


@pytest.fixture
def assign(container):
    """Put an employee on a shift from a far-past date, open-ended."""

    def _assign(shift: ShiftDefinition, employee_id: int = 1) -> ShiftDefinition:
        container.shifts_repo.add(shift)
        container.shifts_repo.upsert_assignment(
            shift_id=shift.shift_id,
            employee_id=employee_id,
            effective_from=date(2020, 1, 1),
            effective_to=None,
        )
        return shift

    return _assign
