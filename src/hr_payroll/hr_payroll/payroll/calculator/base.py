from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping

from ...attendance.model import AttendanceSummary
from ...common.policy import PayrollPolicy
from ...salary.model import ResolvedSalary
from ..model import PayAdjustment


@dataclass(frozen=True)
class Earnings:
    basic: Decimal
    allowances: Mapping[str, Decimal]
    total_allowances: Decimal
    overtime_pay: Decimal
    bonus: Decimal
    arrears: Decimal
    unpaid_leave_deduction: Decimal
    gross_earnings: Decimal

    @property
    def adjusted_basic(self) -> Decimal:
        """Basic after loss of pay; the PF wage base."""
        return self.basic - self.unpaid_leave_deduction


class EarningsCalculator(ABC):
    """Calculator interface (Strategy Pattern for the earnings side of payroll)."""

    @abstractmethod
    def calculate(
        self,
        *,
        salary: ResolvedSalary,
        attendance: AttendanceSummary,
        adjustment: PayAdjustment,
        policy: PayrollPolicy,
    ) -> Earnings:
        raise NotImplementedError
