from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ...common.policy import PayrollPolicy
from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    is_late: bool = False
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_login(self, *, now: datetime, policy: PayrollPolicy, remote: bool) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_logout(self, *, hours: Decimal, policy: PayrollPolicy, current: AttendanceStatus) -> StatusDecision:
        raise NotImplementedError
