from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per staff member per calendar date."""

    attendance_id: int
    staff_id: int
    work_date: date
    status: AttendanceStatus
    login_time: Optional[datetime] = None
    logout_time: Optional[datetime] = None
    total_hours: Decimal = Decimal("0.00")
    overtime_hours: Decimal = Decimal("0.00")
    is_late: bool = False
    note: Optional[str] = None


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model consumed by the payroll record builder.

    Day counts are Decimal because a half day counts 0.5 present and 0.5 absent.
    """

    staff_id: int
    start_date: date
    end_date: date
    working_days: int
    present_days: Decimal
    absent_days: Decimal
    paid_leave_days: Decimal
    late_days: int
    half_days: int
    remote_days: int
    missing_days: int
    total_hours: Decimal
    overtime_hours: Decimal

    @property
    def paid_days(self) -> Decimal:
        return self.present_days + self.paid_leave_days
