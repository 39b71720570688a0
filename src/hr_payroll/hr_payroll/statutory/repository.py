from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import TaxRegime
from .model import StatutoryRate, TaxSlab


class StatutoryRateRepository(Protocol):
    def get_effective(self, day: date) -> Optional[StatutoryRate]:
        """Latest rate row with effective_from <= day."""

        raise NotImplementedError

    def list_all(self) -> Sequence[StatutoryRate]:
        raise NotImplementedError

    def create(self, rate: StatutoryRate) -> int:
        """Persist every field of `rate` except rate_id."""

        raise NotImplementedError


class TaxSlabRepository(Protocol):
    def list_for(self, *, assessment_year: str, regime: Optional[TaxRegime] = None) -> Sequence[TaxSlab]:
        raise NotImplementedError

    def create(
        self,
        *,
        assessment_year: str,
        regime: TaxRegime,
        slab_from: Decimal,
        slab_to: Optional[Decimal],
        rate: Decimal,
        surcharge: Decimal,
        cess: Decimal,
    ) -> int:
        raise NotImplementedError
