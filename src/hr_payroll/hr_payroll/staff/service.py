from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_positive_id
from ..core.constants import EMPLOYEE_CODE_PREFIX
from ..core.enums import EmploymentType
from ..core.exceptions import NotFoundError, ValidationError
from .model import StaffMember
from .repository import StaffRepository

logger = logging.getLogger(__name__)


class StaffService:
    def __init__(self, staff: StaffRepository):
        self._staff = staff

    def hire(
        self,
        *,
        full_name: str,
        join_date: date,
        department: Optional[str] = None,
        position: Optional[str] = None,
        employment_type: str | EmploymentType = EmploymentType.FULL_TIME,
        bank_account: Optional[str] = None,
        ifsc_code: Optional[str] = None,
        pan: Optional[str] = None,
    ) -> StaffMember:
        full_name = require_non_empty(full_name, "Full name")
        try:
            employment_type = EmploymentType(employment_type)
        except ValueError:
            raise ValidationError(f"Unknown employment type: {employment_type}")

        # Sequential code from headcount, as HR has always issued them.
        employee_code = f"{EMPLOYEE_CODE_PREFIX}{self._staff.count() + 1:03d}"
        staff_id = self._staff.create(
            employee_code=employee_code,
            full_name=full_name,
            department=(department or "").strip() or None,
            position=(position or "").strip() or None,
            employment_type=employment_type,
            join_date=join_date,
            bank_account=(bank_account or "").strip() or None,
            ifsc_code=(ifsc_code or "").strip().upper() or None,
            pan=(pan or "").strip().upper() or None,
        )
        logger.info("Hired staff %s as %s", staff_id, employee_code)
        return self.get(staff_id)

    def get(self, staff_id: int) -> StaffMember:
        member = self._staff.get_by_id(require_positive_id(staff_id, "Staff id"))
        if not member:
            raise NotFoundError(f"Staff member {staff_id} not found")
        return member

    def deactivate(self, staff_id: int, *, leave_date: Optional[date] = None) -> StaffMember:
        member = self.get(staff_id)
        leave_date = leave_date or now_local().date()
        if leave_date < member.join_date:
            raise ValidationError("Leave date cannot be before join date")
        if not self._staff.deactivate(member.staff_id, leave_date=leave_date):
            raise ValidationError("Staff member is already inactive")
        logger.info("Deactivated staff %s effective %s", member.staff_id, leave_date)
        return self.get(member.staff_id)

    def list_staff(self, *, active_only: bool = False) -> Sequence[StaffMember]:
        return self._staff.list_all(active_only=active_only)

    def active_for_period(self, *, start: date, end: date) -> Sequence[StaffMember]:
        return [m for m in self._staff.list_active_between(start=start, end=end) if m.is_active_between(start, end)]
