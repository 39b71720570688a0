from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import AdvanceStatus, TaxRegime
from .model import SalaryAdvance, SalaryStructure


class SalaryStructureRepository(Protocol):
    def list_for_staff(self, staff_id: int) -> Sequence[SalaryStructure]:
        raise NotImplementedError

    def list_covering(self, staff_id: int, day: date) -> Sequence[SalaryStructure]:
        """Structures with effective_from <= day < effective_to (open end allowed)."""

        raise NotImplementedError

    def create(
        self,
        *,
        staff_id: int,
        basic_salary: Decimal,
        allowances: Mapping[str, Decimal],
        effective_from: date,
        effective_to: Optional[date],
        tax_regime: TaxRegime,
        voluntary_pf: Decimal,
        group_health_insurance: Decimal,
        term_insurance: Decimal,
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def close_open_structures(self, staff_id: int, *, end: date) -> int:
        """Set effective_to on open-ended structures that start before `end`."""

        raise NotImplementedError


class SalaryAdvanceRepository(Protocol):
    def get(self, advance_id: int) -> Optional[SalaryAdvance]:
        raise NotImplementedError

    def create(self, *, staff_id: int, requested_amount: Decimal, reason: Optional[str]) -> int:
        raise NotImplementedError

    def decide(
        self,
        *,
        advance_id: int,
        status: AdvanceStatus,
        decided_by: int,
        approved_amount: Decimal = Decimal("0.00"),
        repayment_months: int = 0,
        monthly_deduction: Decimal = Decimal("0.00"),
    ) -> bool:
        """Only pending advances can be decided."""

        raise NotImplementedError

    def list_open_for_staff(self, staff_id: int) -> Sequence[SalaryAdvance]:
        """Approved advances with a remaining balance."""

        raise NotImplementedError

    def list_all(self, *, status: Optional[AdvanceStatus] = None, staff_id: Optional[int] = None) -> Sequence[SalaryAdvance]:
        raise NotImplementedError

    def reduce_balance(self, advance_id: int, *, amount: Decimal) -> bool:
        raise NotImplementedError
