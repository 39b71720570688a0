from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO
from ..core.enums import TaxRegime


@dataclass(frozen=True)
class StatutoryRate:
    """PF/ESI ceilings and percentages in force from `effective_from`."""

    rate_id: int
    effective_from: date
    pf_wage_limit: Decimal = Decimal("15000")
    pf_employee_rate: Decimal = Decimal("12")
    pf_employer_rate: Decimal = Decimal("12")
    epf_rate: Decimal = Decimal("8.33")
    edli_rate: Decimal = Decimal("0.5")
    pf_admin_rate: Decimal = Decimal("1.1")
    esi_wage_limit: Decimal = Decimal("25000")
    esi_employee_rate: Decimal = Decimal("0.75")
    esi_employer_rate: Decimal = Decimal("3.25")
    pt_monthly_limit: Decimal = Decimal("200")


@dataclass(frozen=True)
class TaxSlab:
    slab_id: int
    assessment_year: str
    regime: TaxRegime
    slab_from: Decimal
    rate: Decimal
    slab_to: Optional[Decimal] = None
    surcharge: Decimal = ZERO
    cess: Decimal = ZERO
    is_active: bool = True


@dataclass(frozen=True)
class PFContribution:
    applicable_basic: Decimal
    employee: Decimal
    voluntary: Decimal
    epf: Decimal
    eps: Decimal
    edli: Decimal
    admin_charges: Decimal

    @property
    def employer(self) -> Decimal:
        return self.epf + self.eps + self.edli + self.admin_charges


@dataclass(frozen=True)
class ESIContribution:
    applicable: bool
    employee: Decimal
    employer: Decimal


@dataclass(frozen=True)
class TaxComputation:
    regime: TaxRegime
    annual_income: Decimal
    annual_tax: Decimal
    monthly_tds: Decimal


@dataclass(frozen=True)
class StatutoryDeductions:
    pf: PFContribution
    esi: ESIContribution
    tds: TaxComputation
    professional_tax: Decimal

    @property
    def employee_total(self) -> Decimal:
        return self.pf.employee + self.esi.employee + self.tds.monthly_tds + self.professional_tax
