from __future__ import annotations

from decimal import Decimal

from ...attendance.model import AttendanceSummary
from ...common.money import ZERO, money, total
from ...common.policy import PayrollPolicy
from ...salary.model import ResolvedSalary
from ..model import PayAdjustment
from .base import Earnings, EarningsCalculator


class StandardEarningsCalculator(EarningsCalculator):
    """Standard rule: loss of pay on basic only, overtime at a multiple of the hourly basic.

    unpaid_leave = basic * absent_days / working_days
    overtime     = basic / (working_days * day_hours) * overtime_hours * multiplier
    """

    def unpaid_leave_deduction(self, basic: Decimal, attendance: AttendanceSummary) -> Decimal:
        if attendance.working_days <= 0 or attendance.absent_days <= 0:
            return ZERO
        absent = min(attendance.absent_days, Decimal(attendance.working_days))
        return money(basic * absent / Decimal(attendance.working_days))

    def overtime_pay(self, basic: Decimal, attendance: AttendanceSummary, policy: PayrollPolicy) -> Decimal:
        if attendance.working_days <= 0 or attendance.overtime_hours <= 0:
            return ZERO
        hourly = basic / (Decimal(attendance.working_days) * policy.standard_day_hours)
        return money(hourly * attendance.overtime_hours * policy.overtime_multiplier)

    def calculate(
        self,
        *,
        salary: ResolvedSalary,
        attendance: AttendanceSummary,
        adjustment: PayAdjustment,
        policy: PayrollPolicy,
    ) -> Earnings:
        basic = money(salary.basic)
        allowances = {name: money(amount) for name, amount in salary.allowances.items()}
        total_allowances = total(allowances.values())
        overtime = self.overtime_pay(basic, attendance, policy)
        unpaid = self.unpaid_leave_deduction(basic, attendance)
        bonus = money(adjustment.bonus)
        arrears = money(adjustment.arrears)

        return Earnings(
            basic=basic,
            allowances=allowances,
            total_allowances=total_allowances,
            overtime_pay=overtime,
            bonus=bonus,
            arrears=arrears,
            unpaid_leave_deduction=unpaid,
            gross_earnings=basic + total_allowances + overtime + bonus + arrears - unpaid,
        )
