from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from ..common.money import ZERO
from ..core.enums import PeriodStatus, RecordStatus
from ..core.exceptions import InvalidPeriodTransition

PERIOD_TRANSITIONS: Mapping[PeriodStatus, frozenset[PeriodStatus]] = {
    PeriodStatus.DRAFT: frozenset({PeriodStatus.PROCESSING}),
    PeriodStatus.PROCESSING: frozenset({PeriodStatus.APPROVED}),
    PeriodStatus.APPROVED: frozenset({PeriodStatus.PAID}),
    PeriodStatus.PAID: frozenset({PeriodStatus.LOCKED}),
    PeriodStatus.LOCKED: frozenset(),
}

RECORD_TRANSITIONS: Mapping[RecordStatus, frozenset[RecordStatus]] = {
    RecordStatus.DRAFT: frozenset({RecordStatus.CALCULATED, RecordStatus.ERROR}),
    RecordStatus.CALCULATED: frozenset({RecordStatus.CALCULATED, RecordStatus.APPROVED, RecordStatus.ERROR}),
    RecordStatus.ERROR: frozenset({RecordStatus.CALCULATED, RecordStatus.ERROR}),
    RecordStatus.APPROVED: frozenset({RecordStatus.PAID}),
    RecordStatus.PAID: frozenset(),
}

# Money columns of a payroll record, in storage order.
RECORD_MONEY_FIELDS = (
    "basic",
    "total_allowances",
    "overtime_pay",
    "bonus",
    "arrears",
    "unpaid_leave_deduction",
    "gross_earnings",
    "pf_employee",
    "pf_employer",
    "epf",
    "eps",
    "edli",
    "pf_admin_charges",
    "voluntary_pf",
    "esi_employee",
    "esi_employer",
    "tds",
    "professional_tax",
    "insurance",
    "salary_advance",
    "adjustment_deductions",
    "other_deductions",
    "total_deductions",
    "net_pay",
)


def check_period_transition(current: PeriodStatus, target: PeriodStatus) -> None:
    if target not in PERIOD_TRANSITIONS[current]:
        raise InvalidPeriodTransition(current, target)


def check_record_transition(current: RecordStatus, target: RecordStatus) -> None:
    if target not in RECORD_TRANSITIONS[current]:
        raise InvalidPeriodTransition(current, target)


@dataclass(frozen=True)
class PeriodTotals:
    total_employees: int = 0
    total_gross_pay: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_net_pay: Decimal = ZERO


@dataclass(frozen=True)
class PayrollPeriod:
    period_id: int
    name: str
    start_date: date
    end_date: date
    status: PeriodStatus = PeriodStatus.DRAFT
    totals: PeriodTotals = PeriodTotals()
    created_by: Optional[int] = None
    processed_by: Optional[int] = None
    approved_by: Optional[int] = None
    paid_by: Optional[int] = None
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    locked_at: Optional[datetime] = None

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and start <= self.end_date


@dataclass(frozen=True)
class PayrollRecord:
    """Net-pay snapshot for one staff member in one period."""

    record_id: int
    period_id: int
    staff_id: int
    status: RecordStatus = RecordStatus.DRAFT
    structure_id: Optional[int] = None

    working_days: int = 0
    present_days: Decimal = ZERO
    absent_days: Decimal = ZERO
    paid_leave_days: Decimal = ZERO
    late_days: int = 0
    half_days: int = 0
    overtime_hours: Decimal = ZERO

    basic: Decimal = ZERO
    allowances: Mapping[str, Decimal] = field(default_factory=dict)
    total_allowances: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    bonus: Decimal = ZERO
    arrears: Decimal = ZERO
    unpaid_leave_deduction: Decimal = ZERO
    gross_earnings: Decimal = ZERO

    pf_employee: Decimal = ZERO
    pf_employer: Decimal = ZERO
    epf: Decimal = ZERO
    eps: Decimal = ZERO
    edli: Decimal = ZERO
    pf_admin_charges: Decimal = ZERO
    voluntary_pf: Decimal = ZERO
    esi_employee: Decimal = ZERO
    esi_employer: Decimal = ZERO
    tds: Decimal = ZERO
    professional_tax: Decimal = ZERO

    insurance: Decimal = ZERO
    salary_advance: Decimal = ZERO
    adjustment_deductions: Decimal = ZERO
    other_deductions: Decimal = ZERO
    total_deductions: Decimal = ZERO
    net_pay: Decimal = ZERO

    error_message: Optional[str] = None
    payment_mode: Optional[str] = None
    payment_reference: Optional[str] = None
    paid_at: Optional[datetime] = None
    calculated_by: Optional[int] = None
    approved_by: Optional[int] = None

    @property
    def counts_toward_totals(self) -> bool:
        return self.status in (RecordStatus.CALCULATED, RecordStatus.APPROVED, RecordStatus.PAID)


@dataclass(frozen=True)
class PayAdjustment:
    """One-off amounts HR supplies for a staff member when processing a period."""

    bonus: Decimal = ZERO
    arrears: Decimal = ZERO
    other_deductions: Decimal = ZERO


@dataclass(frozen=True)
class ProcessingError:
    employee_id: int
    message: str


@dataclass(frozen=True)
class ProcessingResult:
    success: int
    errors: Sequence[ProcessingError] = ()

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "errors": [{"employeeId": e.employee_id, "message": e.message} for e in self.errors],
        }


@dataclass(frozen=True)
class PeriodDetail:
    period: PayrollPeriod
    records: Sequence[PayrollRecord]
