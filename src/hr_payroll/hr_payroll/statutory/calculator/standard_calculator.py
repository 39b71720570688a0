from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from ...common.money import ZERO, money, percent_of
from ...core.constants import PROFESSIONAL_TAX_SLABS, PROFESSIONAL_TAX_TOP
from ...core.enums import TaxRegime
from ...core.exceptions import RateTableNotFound, ValidationError
from ..model import ESIContribution, PFContribution, StatutoryDeductions, StatutoryRate, TaxComputation, TaxSlab
from .base import DeductionCalculator

MONTHS_PER_YEAR = Decimal("12")


class StatutoryDeductionCalculator(DeductionCalculator):
    """Indian PF / ESI / TDS / professional tax rules.

    Each component is computed at full precision and rounded once (2 dp,
    half-up) when it is produced.
    """

    def pf(self, basic: Decimal, rates: StatutoryRate, voluntary: Decimal = ZERO) -> PFContribution:
        if basic < 0:
            raise ValidationError("Basic salary cannot be negative")
        capped = min(basic, rates.pf_wage_limit)
        voluntary = money(voluntary)
        return PFContribution(
            applicable_basic=money(capped),
            employee=money(percent_of(capped, rates.pf_employee_rate)) + voluntary,
            voluntary=voluntary,
            epf=money(percent_of(capped, rates.epf_rate)),
            eps=money(percent_of(capped, rates.pf_employer_rate - rates.epf_rate)),
            edli=money(percent_of(capped, rates.edli_rate)),
            admin_charges=money(percent_of(capped, rates.pf_admin_rate)),
        )

    def esi(self, gross: Decimal, rates: StatutoryRate) -> ESIContribution:
        # All-or-nothing on the threshold; the rate applies to the full gross.
        if gross > rates.esi_wage_limit or gross <= 0:
            return ESIContribution(applicable=False, employee=ZERO, employer=ZERO)
        return ESIContribution(
            applicable=True,
            employee=money(percent_of(gross, rates.esi_employee_rate)),
            employer=money(percent_of(gross, rates.esi_employer_rate)),
        )

    def annual_tax(self, income: Decimal, slabs: Sequence[TaxSlab]) -> Decimal:
        """Progressive slab tax at full precision (unrounded)."""
        tax = ZERO
        for slab in sorted(slabs, key=lambda s: s.slab_from):
            if income <= slab.slab_from:
                continue
            upper = income if slab.slab_to is None else min(income, slab.slab_to)
            slab_tax = percent_of(upper - slab.slab_from, slab.rate)
            slab_tax += percent_of(slab_tax, slab.surcharge)
            slab_tax += percent_of(slab_tax, slab.cess)
            tax += slab_tax
        return tax

    def tds(self, monthly_gross: Decimal, slabs: Sequence[TaxSlab], regime: TaxRegime) -> TaxComputation:
        applicable = [s for s in slabs if s.regime == regime and s.is_active]
        if not applicable:
            raise RateTableNotFound(f"No active tax slabs for the '{regime.value}' regime")

        income = monthly_gross * MONTHS_PER_YEAR
        tax = self.annual_tax(income, applicable)
        return TaxComputation(
            regime=regime,
            annual_income=money(income),
            annual_tax=money(tax),
            monthly_tds=money(tax / MONTHS_PER_YEAR),
        )

    def professional_tax(self, gross: Decimal, rates: StatutoryRate) -> Decimal:
        for upper, amount in PROFESSIONAL_TAX_SLABS:
            if gross <= upper:
                return money(amount)
        return money(min(PROFESSIONAL_TAX_TOP, rates.pt_monthly_limit))

    def calculate(
        self,
        *,
        basic: Decimal,
        gross: Decimal,
        rates: StatutoryRate,
        slabs: Sequence[TaxSlab],
        regime: TaxRegime,
        voluntary_pf: Decimal = ZERO,
    ) -> StatutoryDeductions:
        if gross < 0:
            raise ValidationError("Gross salary cannot be negative")
        return StatutoryDeductions(
            pf=self.pf(basic, rates, voluntary_pf),
            esi=self.esi(gross, rates),
            tds=self.tds(gross, slabs, regime),
            professional_tax=self.professional_tax(gross, rates),
        )
