from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...common.policy import PayrollPolicy
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Logged out before completing the half-day threshold."""

    def decide_login(self, *, now: datetime, policy: PayrollPolicy, remote: bool) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.HALF_DAY)

    def decide_logout(self, *, hours: Decimal, policy: PayrollPolicy, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.HALF_DAY,
            is_late=current == AttendanceStatus.LATE,
            note=f"Worked {hours}h, below {policy.half_day_hours}h",
        )
