from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from ..common.money import ZERO, total
from ..core.enums import AdvanceStatus, TaxRegime

# Allowance names HR uses on salary structures; other names are accepted too.
STANDARD_ALLOWANCES = (
    "hra",
    "da",
    "conveyance",
    "medical",
    "special",
    "performance_incentive",
    "other",
)


@dataclass(frozen=True)
class SalaryStructure:
    """Versioned compensation valid over [effective_from, effective_to)."""

    structure_id: int
    staff_id: int
    basic_salary: Decimal
    effective_from: date
    effective_to: Optional[date] = None
    allowances: Mapping[str, Decimal] = field(default_factory=dict)
    tax_regime: TaxRegime = TaxRegime.NEW
    voluntary_pf: Decimal = ZERO
    group_health_insurance: Decimal = ZERO
    term_insurance: Decimal = ZERO
    created_by: Optional[int] = None

    def covers(self, day: date) -> bool:
        if day < self.effective_from:
            return False
        return self.effective_to is None or day < self.effective_to

    @property
    def total_allowances(self) -> Decimal:
        return total(self.allowances.values())

    @property
    def gross_salary(self) -> Decimal:
        return self.basic_salary + self.total_allowances


@dataclass(frozen=True)
class ResolvedSalary:
    structure: SalaryStructure
    basic: Decimal
    allowances: Mapping[str, Decimal]
    gross: Decimal


@dataclass(frozen=True)
class SalaryAdvance:
    advance_id: int
    staff_id: int
    requested_amount: Decimal
    status: AdvanceStatus
    reason: Optional[str] = None
    approved_amount: Decimal = ZERO
    repayment_months: int = 0
    monthly_deduction: Decimal = ZERO
    remaining_amount: Decimal = ZERO
    approved_by: Optional[int] = None

    def next_installment(self) -> Decimal:
        if self.status != AdvanceStatus.APPROVED:
            return ZERO
        return min(self.monthly_deduction, self.remaining_amount)
