from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import EmploymentType


@dataclass(frozen=True)
class StaffMember:
    """Domain entity: an employee. Plain data, no DB access."""

    staff_id: int
    employee_code: str
    full_name: str
    department: Optional[str]
    position: Optional[str]
    employment_type: EmploymentType
    join_date: date
    leave_date: Optional[date] = None
    is_active: bool = True
    bank_account: Optional[str] = None
    ifsc_code: Optional[str] = None
    pan: Optional[str] = None

    def is_active_between(self, start: date, end: date) -> bool:
        """Employed for at least one day of [start, end].

        Judged on join and leave dates only: a member who has since left is
        still paid for the days worked in the period.
        """
        if self.join_date > end:
            return False
        return self.leave_date is None or self.leave_date >= start
