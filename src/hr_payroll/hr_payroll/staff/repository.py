from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import EmploymentType
from .model import StaffMember


class StaffRepository(Protocol):
    """Repository interface for StaffMember.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, staff_id: int) -> Optional[StaffMember]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_code: str,
        full_name: str,
        department: Optional[str],
        position: Optional[str],
        employment_type: EmploymentType,
        join_date: date,
        bank_account: Optional[str] = None,
        ifsc_code: Optional[str] = None,
        pan: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def deactivate(self, staff_id: int, *, leave_date: date) -> bool:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False) -> Sequence[StaffMember]:
        raise NotImplementedError

    def list_active_between(self, *, start: date, end: date) -> Sequence[StaffMember]:
        raise NotImplementedError
