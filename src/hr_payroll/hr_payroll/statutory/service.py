from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import assessment_year_for
from ..common.money import to_decimal
from ..common.validators import require_non_empty, require_non_negative
from ..core.enums import TaxRegime
from ..core.exceptions import RateTableNotFound, ValidationError
from .model import StatutoryRate, TaxSlab
from .repository import StatutoryRateRepository, TaxSlabRepository

_PERCENT_FIELDS = (
    "pf_employee_rate",
    "pf_employer_rate",
    "epf_rate",
    "edli_rate",
    "pf_admin_rate",
    "esi_employee_rate",
    "esi_employer_rate",
)
_LIMIT_FIELDS = ("pf_wage_limit", "esi_wage_limit", "pt_monthly_limit")


class StatutoryRateService:
    """Time-versioned rate table and tax slab lookups."""

    def __init__(self, rates: StatutoryRateRepository, slabs: TaxSlabRepository):
        self._rates = rates
        self._slabs = slabs

    def rates_for(self, day: date) -> StatutoryRate:
        rate = self._rates.get_effective(day)
        if rate is None:
            raise RateTableNotFound(f"No statutory rates effective on {day.isoformat()}")
        return rate

    def slabs_for(self, day: date, regime: Optional[TaxRegime] = None) -> Sequence[TaxSlab]:
        year = assessment_year_for(day)
        slabs = self._slabs.list_for(assessment_year=year, regime=regime)
        if not slabs:
            raise RateTableNotFound(f"No tax slabs for assessment year {year}")
        return slabs

    def list_rates(self) -> Sequence[StatutoryRate]:
        return self._rates.list_all()

    def list_slabs(self, *, assessment_year: str, regime: Optional[str] = None) -> Sequence[TaxSlab]:
        try:
            regime = TaxRegime(regime) if regime else None
        except ValueError:
            raise ValidationError(f"Unknown tax regime: {regime}")
        return self._slabs.list_for(assessment_year=require_non_empty(assessment_year, "Assessment year"), regime=regime)

    def create_rates(self, *, effective_from: date, values: Mapping[str, Any]) -> StatutoryRate:
        defaults = StatutoryRate(rate_id=0, effective_from=effective_from)
        fields: dict[str, Any] = {}
        for name in _PERCENT_FIELDS + _LIMIT_FIELDS:
            raw = values.get(name)
            amount = getattr(defaults, name) if raw is None else require_non_negative(raw, name)
            if name in _PERCENT_FIELDS and amount > 100:
                raise ValidationError(f"{name} must be a percentage")
            fields[name] = amount
        if fields["epf_rate"] > fields["pf_employer_rate"]:
            raise ValidationError("epf_rate cannot exceed pf_employer_rate")

        rate = StatutoryRate(rate_id=0, effective_from=effective_from, **fields)
        rate_id = self._rates.create(rate)
        return StatutoryRate(rate_id=rate_id, effective_from=effective_from, **fields)

    def create_slab(
        self,
        *,
        assessment_year: str,
        regime: str | TaxRegime,
        slab_from: Any,
        rate: Any,
        slab_to: Any = None,
        surcharge: Any = 0,
        cess: Any = 0,
    ) -> TaxSlab:
        assessment_year = require_non_empty(assessment_year, "Assessment year")
        try:
            regime = TaxRegime(regime)
        except ValueError:
            raise ValidationError(f"Unknown tax regime: {regime}")

        lower = require_non_negative(slab_from, "slab_from")
        upper = None if slab_to in (None, "") else to_decimal(slab_to, "slab_to")
        if upper is not None and upper <= lower:
            raise ValidationError("slab_to must be greater than slab_from")
        pct = require_non_negative(rate, "rate")
        if pct > 100:
            raise ValidationError("rate must be a percentage")

        slab_id = self._slabs.create(
            assessment_year=assessment_year,
            regime=regime,
            slab_from=lower,
            slab_to=upper,
            rate=pct,
            surcharge=require_non_negative(surcharge, "surcharge"),
            cess=require_non_negative(cess, "cess"),
        )
        return TaxSlab(
            slab_id=slab_id,
            assessment_year=assessment_year,
            regime=regime,
            slab_from=lower,
            slab_to=upper,
            rate=pct,
            surcharge=require_non_negative(surcharge, "surcharge"),
            cess=require_non_negative(cess, "cess"),
        )
