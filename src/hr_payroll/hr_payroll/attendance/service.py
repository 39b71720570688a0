from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.money import money
from ..common.policy import PayrollPolicy
from ..common.validators import require_non_negative
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..staff.repository import StaffRepository
from .aggregator import AttendanceAggregator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceSummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Attendance capture (login/logout, HR manual entries) and summaries."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        staff: StaffRepository,
        aggregator: AttendanceAggregator,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        policy: PayrollPolicy | None = None,
    ):
        self._attendance = attendance
        self._staff = staff
        self._aggregator = aggregator
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._policy = policy or PayrollPolicy()

    def _require_active_staff(self, staff_id: int):
        member = self._staff.get_by_id(int(staff_id))
        if not member:
            raise ValidationError("Staff member does not exist")
        if not member.is_active:
            raise ValidationError("Staff member is inactive")
        return member

    def record_login(
        self,
        staff_id: int,
        *,
        now: datetime | None = None,
        remote: bool = False,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        self._require_active_staff(staff_id)

        if self._attendance.get_for_staff_and_date(int(staff_id), today):
            raise ValidationError("Attendance already recorded for today")

        strategy = self._factory.for_login(now=now, policy=self._policy)
        decision = strategy.decide_login(now=now, policy=self._policy, remote=remote)

        self._attendance.create_login(
            staff_id=int(staff_id),
            work_date=today,
            login_time=now,
            status=decision.status,
            is_late=decision.is_late,
            note=(note or "").strip() or decision.note,
        )
        self._aggregator.invalidate(staff_id)
        return self._attendance.get_for_staff_and_date(int(staff_id), today)

    def record_logout(self, staff_id: int, *, now: datetime | None = None, note: Optional[str] = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        record = self._attendance.get_for_staff_and_date(int(staff_id), today)
        if not record or record.login_time is None:
            raise ValidationError("No login recorded for today")
        if record.logout_time is not None:
            raise ValidationError("Logout already recorded for today")
        if now < record.login_time:
            raise ValidationError("Logout cannot be before login")

        hours = money(Decimal((now - record.login_time).total_seconds()) / Decimal(3600))
        overtime = max(hours - self._policy.standard_day_hours, Decimal("0.00"))

        strategy = self._factory.for_logout(hours=hours, policy=self._policy)
        decision = strategy.decide_logout(hours=hours, policy=self._policy, current=record.status)

        ok = self._attendance.update_logout(
            attendance_id=record.attendance_id,
            logout_time=now,
            total_hours=hours,
            overtime_hours=money(overtime),
            status=decision.status,
            note=(note or "").strip() or decision.note or record.note,
        )
        if not ok:
            raise ValidationError("Failed to record logout")
        self._aggregator.invalidate(staff_id)
        return self._attendance.get_for_staff_and_date(int(staff_id), today)

    def record_manual(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: str | AttendanceStatus,
        total_hours=0,
        overtime_hours=0,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        self._require_active_staff(staff_id)
        try:
            status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {status}")

        hours = money(require_non_negative(total_hours, "Total hours"))
        overtime = money(require_non_negative(overtime_hours, "Overtime hours"))
        if hours > 24 or overtime > hours:
            raise ValidationError("Hours are out of range")
        if status in (AttendanceStatus.ABSENT, AttendanceStatus.LEAVE) and hours > 0:
            raise ValidationError(f"A '{status.value}' day cannot carry worked hours")

        self._attendance.upsert_manual(
            staff_id=int(staff_id),
            work_date=work_date,
            status=status,
            total_hours=hours,
            overtime_hours=overtime,
            is_late=status == AttendanceStatus.LATE,
            note=(note or "").strip() or None,
        )
        self._aggregator.invalidate(staff_id)
        logger.info("Manual attendance %s for staff %s on %s", status.value, staff_id, work_date)
        return self._attendance.get_for_staff_and_date(int(staff_id), work_date)

    def summary(self, staff_id: int, *, start: date, end: date) -> AttendanceSummary:
        return self._aggregator.summarize(int(staff_id), start=start, end=end)
