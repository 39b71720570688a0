from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...common.policy import PayrollPolicy
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late login. Remote workers keep REMOTE but are still flagged late."""

    def decide_login(self, *, now: datetime, policy: PayrollPolicy, remote: bool) -> StatusDecision:
        start = policy.office_start.strftime("%H:%M")
        return StatusDecision(
            status=AttendanceStatus.REMOTE if remote else AttendanceStatus.LATE,
            is_late=True,
            note=f"Logged in at {now.strftime('%H:%M')} (start {start})",
        )

    def decide_logout(self, *, hours: Decimal, policy: PayrollPolicy, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current, is_late=True)
