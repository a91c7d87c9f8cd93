from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by the payroll engine.

    Plain data object, owned by the staff directory; this package only reads it.
    """

    employee_id: int
    tenant_id: int
    full_name: str
    base_salary: Decimal
    is_active: bool = True
