from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_staff_and_date(self, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_staff_between(self, staff_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_login(
        self,
        *,
        staff_id: int,
        work_date: date,
        login_time: datetime,
        status: AttendanceStatus,
        is_late: bool,
        note: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_logout(
        self,
        *,
        attendance_id: int,
        logout_time: datetime,
        total_hours: Decimal,
        overtime_hours: Decimal,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def upsert_manual(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: AttendanceStatus,
        total_hours: Decimal,
        overtime_hours: Decimal,
        is_late: bool,
        note: Optional[str] = None,
    ) -> int:
        """HR-entered row (absence, leave, corrections); replaces any existing row."""

        raise NotImplementedError
