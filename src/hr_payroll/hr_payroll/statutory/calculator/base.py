from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Sequence

from ...core.enums import TaxRegime
from ..model import StatutoryDeductions, StatutoryRate, TaxSlab


class DeductionCalculator(ABC):
    """Calculator interface (Strategy Pattern for statutory deductions)."""

    @abstractmethod
    def calculate(
        self,
        *,
        basic: Decimal,
        gross: Decimal,
        rates: StatutoryRate,
        slabs: Sequence[TaxSlab],
        regime: TaxRegime,
        voluntary_pf: Decimal = Decimal("0.00"),
    ) -> StatutoryDeductions:
        raise NotImplementedError
