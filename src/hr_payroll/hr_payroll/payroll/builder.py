from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..attendance.aggregator import AttendanceAggregator
from ..common.money import money, percent_of, total
from ..common.policy import PayrollPolicy
from ..core.enums import RecordStatus
from ..core.exceptions import ValidationError
from ..salary.repository import SalaryAdvanceRepository
from ..salary.resolver import SalaryStructureResolver
from ..statutory.calculator.base import DeductionCalculator
from ..statutory.calculator.standard_calculator import StatutoryDeductionCalculator
from ..statutory.model import StatutoryRate, TaxSlab
from .calculator.base import EarningsCalculator
from .calculator.standard_calculator import StandardEarningsCalculator
from .model import PayAdjustment, PayrollPeriod, PayrollRecord

logger = logging.getLogger(__name__)


class PayrollRecordBuilder:
    """Combines attendance, salary structure and deductions into one record.

    The builder never writes; the period service persists what it returns.
    Domain errors (missing structure, missing tax slabs, invalid counts)
    propagate so the caller can mark the record as `error`.
    """

    def __init__(
        self,
        *,
        aggregator: AttendanceAggregator,
        resolver: SalaryStructureResolver,
        advances: SalaryAdvanceRepository,
        deductions: Optional[DeductionCalculator] = None,
        earnings: Optional[EarningsCalculator] = None,
        policy: Optional[PayrollPolicy] = None,
    ):
        self._aggregator = aggregator
        self._resolver = resolver
        self._advances = advances
        self._deductions = deductions or StatutoryDeductionCalculator()
        self._earnings = earnings or StandardEarningsCalculator()
        self._policy = policy or PayrollPolicy()

    def build(
        self,
        *,
        period: PayrollPeriod,
        staff_id: int,
        rates: StatutoryRate,
        slabs: Sequence[TaxSlab],
        record_id: int = 0,
        adjustment: Optional[PayAdjustment] = None,
        acting_user_id: Optional[int] = None,
    ) -> PayrollRecord:
        adjustment = adjustment or PayAdjustment()
        if min(adjustment.bonus, adjustment.arrears, adjustment.other_deductions) < 0:
            raise ValidationError("Adjustments cannot be negative")

        attendance = self._aggregator.compute(staff_id, start=period.start_date, end=period.end_date)
        if attendance.paid_days > attendance.working_days:
            raise ValidationError("Present days cannot exceed working days")

        salary = self._resolver.resolve(staff_id, period.end_date)
        structure = salary.structure
        earnings = self._earnings.calculate(
            salary=salary,
            attendance=attendance,
            adjustment=adjustment,
            policy=self._policy,
        )
        if earnings.gross_earnings <= 0:
            raise ValidationError("Gross earnings must be positive")

        statutory = self._deductions.calculate(
            basic=earnings.adjusted_basic,
            gross=earnings.gross_earnings,
            rates=rates,
            slabs=slabs,
            regime=structure.tax_regime,
            voluntary_pf=structure.voluntary_pf,
        )

        insurance = money(structure.group_health_insurance + structure.term_insurance)
        advance = money(total(a.next_installment() for a in self._advances.list_open_for_staff(staff_id)))
        manual = money(adjustment.other_deductions)
        other = insurance + advance + manual
        total_deductions = statutory.employee_total + other
        net_pay = earnings.gross_earnings - total_deductions

        if net_pay < 0:
            logger.warning("Staff %s: net pay is negative (%s) in period %s", staff_id, net_pay, period.period_id)
        if statutory.pf.employee - statutory.pf.voluntary > money(percent_of(earnings.adjusted_basic, rates.pf_employee_rate)):
            logger.warning("Staff %s: PF deduction %s looks high for basic %s", staff_id, statutory.pf.employee, earnings.adjusted_basic)

        return PayrollRecord(
            record_id=record_id,
            period_id=period.period_id,
            staff_id=int(staff_id),
            status=RecordStatus.CALCULATED,
            structure_id=structure.structure_id,
            working_days=attendance.working_days,
            present_days=attendance.present_days,
            absent_days=attendance.absent_days,
            paid_leave_days=attendance.paid_leave_days,
            late_days=attendance.late_days,
            half_days=attendance.half_days,
            overtime_hours=attendance.overtime_hours,
            basic=earnings.basic,
            allowances=dict(earnings.allowances),
            total_allowances=earnings.total_allowances,
            overtime_pay=earnings.overtime_pay,
            bonus=earnings.bonus,
            arrears=earnings.arrears,
            unpaid_leave_deduction=earnings.unpaid_leave_deduction,
            gross_earnings=earnings.gross_earnings,
            pf_employee=statutory.pf.employee,
            pf_employer=statutory.pf.employer,
            epf=statutory.pf.epf,
            eps=statutory.pf.eps,
            edli=statutory.pf.edli,
            pf_admin_charges=statutory.pf.admin_charges,
            voluntary_pf=statutory.pf.voluntary,
            esi_employee=statutory.esi.employee,
            esi_employer=statutory.esi.employer,
            tds=statutory.tds.monthly_tds,
            professional_tax=statutory.professional_tax,
            insurance=insurance,
            salary_advance=advance,
            adjustment_deductions=manual,
            other_deductions=other,
            total_deductions=total_deductions,
            net_pay=net_pay,
            calculated_by=acting_user_id,
        )


def error_record(
    *,
    period: PayrollPeriod,
    staff_id: int,
    message: str,
    record_id: int = 0,
    acting_user_id: Optional[int] = None,
) -> PayrollRecord:
    """Zero-amount placeholder kept for a staff member whose calculation failed."""
    return PayrollRecord(
        record_id=record_id,
        period_id=period.period_id,
        staff_id=int(staff_id),
        status=RecordStatus.ERROR,
        error_message=message,
        calculated_by=acting_user_id,
    )
