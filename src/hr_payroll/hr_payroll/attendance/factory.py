from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from ..common.policy import PayrollPolicy
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_login(self, *, now: datetime, policy: PayrollPolicy) -> AttendanceStrategy:
        office_start = datetime.combine(now.date(), policy.office_start)
        if now <= office_start + timedelta(minutes=policy.late_grace_minutes):
            return NormalStrategy()
        return LateStrategy()

    def for_logout(self, *, hours: Decimal, policy: PayrollPolicy) -> AttendanceStrategy:
        if hours < policy.half_day_hours:
            return HalfDayStrategy()
        return NormalStrategy()
