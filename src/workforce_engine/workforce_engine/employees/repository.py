from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(
        self,
        *,
        tenant_id: Optional[int] = None,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[Employee]:
        raise NotImplementedError
