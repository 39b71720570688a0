from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..common.money import money
from ..common.validators import require_date_range, require_non_negative, require_positive_id
from ..core.enums import AdvanceStatus, TaxRegime
from ..core.exceptions import NotFoundError, ValidationError
from ..staff.repository import StaffRepository
from .model import STANDARD_ALLOWANCES, SalaryAdvance, SalaryStructure
from .repository import SalaryAdvanceRepository, SalaryStructureRepository

logger = logging.getLogger(__name__)


class SalaryService:
    """Salary structure versioning and salary advances."""

    def __init__(
        self,
        structures: SalaryStructureRepository,
        advances: SalaryAdvanceRepository,
        staff: StaffRepository,
    ):
        self._structures = structures
        self._advances = advances
        self._staff = staff

    def _require_staff(self, staff_id: Any) -> int:
        staff_id = require_positive_id(staff_id, "Staff id")
        if not self._staff.get_by_id(staff_id):
            raise NotFoundError(f"Staff member {staff_id} not found")
        return staff_id

    def create_structure(
        self,
        *,
        staff_id: int,
        basic_salary: Any,
        effective_from: date,
        effective_to: Optional[date] = None,
        allowances: Optional[Mapping[str, Any]] = None,
        tax_regime: str | TaxRegime = TaxRegime.NEW,
        voluntary_pf: Any = 0,
        group_health_insurance: Any = 0,
        term_insurance: Any = 0,
        created_by: Optional[int] = None,
        supersede: bool = True,
    ) -> SalaryStructure:
        """Add a structure version.

        With `supersede`, open-ended older versions are closed the day the new
        one takes effect so that at most one version is active per date.
        """
        staff_id = self._require_staff(staff_id)
        basic = money(require_non_negative(basic_salary, "Basic salary"))
        if basic <= 0:
            raise ValidationError("Basic salary must be positive")
        require_date_range(effective_from, effective_to, "effective range")
        if effective_to is not None and effective_to == effective_from:
            raise ValidationError("Effective range is empty")

        clean_allowances: dict[str, Decimal] = {}
        for name, amount in (allowances or {}).items():
            key = str(name).strip().lower()
            if not key:
                raise ValidationError("Allowance name is required")
            if key not in STANDARD_ALLOWANCES:
                logger.info("Staff %s: non-standard allowance '%s'", staff_id, key)
            clean_allowances[key] = money(require_non_negative(amount, f"Allowance '{key}'"))

        try:
            regime = TaxRegime(tax_regime)
        except ValueError:
            raise ValidationError(f"Unknown tax regime: {tax_regime}")

        if supersede:
            closed = self._structures.close_open_structures(staff_id, end=effective_from)
            if closed:
                logger.info("Closed %s open salary structure(s) for staff %s at %s", closed, staff_id, effective_from)

        structure_id = self._structures.create(
            staff_id=staff_id,
            basic_salary=basic,
            allowances=clean_allowances,
            effective_from=effective_from,
            effective_to=effective_to,
            tax_regime=regime,
            voluntary_pf=money(require_non_negative(voluntary_pf, "Voluntary PF")),
            group_health_insurance=money(require_non_negative(group_health_insurance, "Group health insurance")),
            term_insurance=money(require_non_negative(term_insurance, "Term insurance")),
            created_by=created_by,
        )
        return next(s for s in self._structures.list_for_staff(staff_id) if s.structure_id == structure_id)

    def list_structures(self, staff_id: int) -> Sequence[SalaryStructure]:
        return self._structures.list_for_staff(self._require_staff(staff_id))

    # Salary advances

    def request_advance(self, *, staff_id: int, amount: Any, reason: Optional[str] = None) -> SalaryAdvance:
        staff_id = self._require_staff(staff_id)
        requested = money(require_non_negative(amount, "Advance amount"))
        if requested <= 0:
            raise ValidationError("Advance amount must be positive")
        advance_id = self._advances.create(staff_id=staff_id, requested_amount=requested, reason=(reason or "").strip() or None)
        return self._advances.get(advance_id)

    def approve_advance(
        self,
        *,
        advance_id: int,
        approved_by: int,
        approved_amount: Any,
        repayment_months: int,
    ) -> SalaryAdvance:
        approved = money(require_non_negative(approved_amount, "Approved amount"))
        if approved <= 0:
            raise ValidationError("Approved amount must be positive")
        if int(repayment_months) <= 0:
            raise ValidationError("Repayment period must be at least one month")

        # Installments round up so the balance is cleared within the period.
        installment = money(approved / Decimal(int(repayment_months)))
        if installment * int(repayment_months) < approved:
            installment += Decimal("0.01")

        ok = self._advances.decide(
            advance_id=int(advance_id),
            status=AdvanceStatus.APPROVED,
            decided_by=int(approved_by),
            approved_amount=approved,
            repayment_months=int(repayment_months),
            monthly_deduction=installment,
        )
        if not ok:
            raise ValidationError("Advance is not pending")
        return self._advances.get(int(advance_id))

    def reject_advance(self, *, advance_id: int, rejected_by: int) -> SalaryAdvance:
        if not self._advances.decide(advance_id=int(advance_id), status=AdvanceStatus.REJECTED, decided_by=int(rejected_by)):
            raise ValidationError("Advance is not pending")
        return self._advances.get(int(advance_id))

    def list_advances(self, *, status: Optional[str] = None, staff_id: Optional[int] = None) -> Sequence[SalaryAdvance]:
        try:
            status = AdvanceStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Unknown advance status: {status}")
        return self._advances.list_all(
            status=status,
            staff_id=int(staff_id) if staff_id else None,
        )
