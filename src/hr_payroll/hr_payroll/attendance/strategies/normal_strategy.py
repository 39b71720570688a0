from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...common.policy import PayrollPolicy
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time login; a full day at logout keeps the login status."""

    def decide_login(self, *, now: datetime, policy: PayrollPolicy, remote: bool) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.REMOTE if remote else AttendanceStatus.PRESENT)

    def decide_logout(self, *, hours: Decimal, policy: PayrollPolicy, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
