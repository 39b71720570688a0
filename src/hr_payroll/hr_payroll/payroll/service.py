from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.money import ZERO, money, total
from ..common.validators import require_date_range, require_non_empty, require_positive_id
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import PaymentMode, PeriodStatus, RecordStatus
from ..core.exceptions import DomainError, InvalidPeriodTransition, NotFoundError, ValidationError
from ..salary.repository import SalaryAdvanceRepository
from ..staff.repository import StaffRepository
from ..statutory.model import StatutoryRate, TaxSlab
from ..statutory.service import StatutoryRateService
from .builder import PayrollRecordBuilder, error_record
from .model import (
    PayAdjustment,
    PayrollPeriod,
    PayrollRecord,
    PeriodDetail,
    PeriodTotals,
    ProcessingError,
    ProcessingResult,
    check_period_transition,
    check_record_transition,
)
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

# Records that a processing run may (re)calculate.
_RECALCULABLE = (RecordStatus.DRAFT, RecordStatus.CALCULATED, RecordStatus.ERROR)


class PayrollPeriodService:
    """Payroll period lifecycle: draft -> processing -> approved -> paid -> locked.

    Status moves go through a conditional update on the current status, so two
    concurrent `process_period` calls cannot both build records.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        staff: StaffRepository,
        builder: PayrollRecordBuilder,
        statutory: StatutoryRateService,
        advances: SalaryAdvanceRepository,
    ):
        self._payroll = payroll
        self._staff = staff
        self._builder = builder
        self._statutory = statutory
        self._advances = advances

    # Periods

    def create_period(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        created_by: Optional[int] = None,
    ) -> PayrollPeriod:
        name = require_non_empty(name, "Period name")
        require_date_range(start_date, end_date, "period")

        clash = self._payroll.list_overlapping(start=start_date, end=end_date)
        if clash:
            raise ValidationError(f"Period overlaps existing period '{clash[0].name}'")

        period_id = self._payroll.create_period(
            name=name,
            start_date=start_date,
            end_date=end_date,
            created_by=created_by,
        )
        logger.info("Created payroll period %s (%s to %s)", period_id, start_date, end_date)
        return self.get_period(period_id)

    def get_period(self, period_id: int) -> PayrollPeriod:
        period = self._payroll.get_period(require_positive_id(period_id, "Period id"))
        if not period:
            raise NotFoundError(f"Payroll period {period_id} not found")
        return period

    def list_periods(self, *, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[PayrollPeriod]:
        return self._payroll.list_periods(limit=limit)

    def get_period_detail(self, period_id: int) -> PeriodDetail:
        period = self.get_period(period_id)
        return PeriodDetail(period=period, records=self._payroll.list_records(period.period_id))

    def get_record(self, record_id: int) -> PayrollRecord:
        record = self._payroll.get_record(require_positive_id(record_id, "Record id"))
        if not record:
            raise NotFoundError(f"Payroll record {record_id} not found")
        return record

    def _advance(self, period: PayrollPeriod, target: PeriodStatus, acting_user_id: Optional[int]) -> None:
        check_period_transition(period.status, target)
        ok = self._payroll.transition_period(
            period.period_id,
            from_status=period.status,
            to_status=target,
            acting_user_id=acting_user_id,
            at=now_local(),
        )
        if not ok:
            # Someone else moved the period first.
            current = self.get_period(period.period_id)
            raise InvalidPeriodTransition(current.status, target)
        logger.info("Payroll period %s: %s -> %s", period.period_id, period.status.value, target.value)

    def _recompute_totals(self, period_id: int) -> PeriodTotals:
        counted = [r for r in self._payroll.list_records(period_id) if r.counts_toward_totals]
        totals = PeriodTotals(
            total_employees=len(counted),
            total_gross_pay=total(r.gross_earnings for r in counted),
            total_deductions=total(r.total_deductions for r in counted),
            total_net_pay=total(r.net_pay for r in counted),
        )
        self._payroll.update_period_totals(period_id, totals)
        return totals

    # Processing

    def process_period(
        self,
        period_id: int,
        *,
        acting_user_id: Optional[int] = None,
        staff_ids: Optional[Iterable[int]] = None,
        adjustments: Optional[Mapping[int, PayAdjustment]] = None,
    ) -> ProcessingResult:
        """Build a record for every staff member active in the period.

        One failing staff member does not stop the run: the record is stored
        as `error` and reported in the result.
        """
        period = self.get_period(period_id)
        check_period_transition(period.status, PeriodStatus.PROCESSING)

        # Rate tables first: a missing table fails the call with the period untouched.
        rates = self._statutory.rates_for(period.end_date)
        slabs = self._statutory.slabs_for(period.end_date)

        active = {m.staff_id for m in self._staff.list_active_between(start=period.start_date, end=period.end_date)}
        errors: list[ProcessingError] = []
        if staff_ids is None:
            targets = sorted(active)
        else:
            targets = []
            for staff_id in dict.fromkeys(int(s) for s in staff_ids):
                if staff_id in active:
                    targets.append(staff_id)
                else:
                    errors.append(ProcessingError(staff_id, "Staff member is not active in this period"))

        self._advance(period, PeriodStatus.PROCESSING, acting_user_id)
        period = self.get_period(period.period_id)

        placeholders = {
            staff_id: self._payroll.save_record(PayrollRecord(record_id=0, period_id=period.period_id, staff_id=staff_id))
            for staff_id in targets
        }

        success = 0
        for staff_id, record_id in placeholders.items():
            if self._calculate_one(
                period,
                staff_id,
                record_id=record_id,
                rates=rates,
                slabs=slabs,
                adjustment=(adjustments or {}).get(staff_id),
                acting_user_id=acting_user_id,
                errors=errors,
            ):
                success += 1

        totals = self._recompute_totals(period.period_id)
        logger.info(
            "Processed payroll period %s: %s calculated, %s failed, net %s",
            period.period_id,
            success,
            len(errors),
            totals.total_net_pay,
        )
        return ProcessingResult(success=success, errors=tuple(errors))

    def recalculate(
        self,
        period_id: int,
        *,
        acting_user_id: Optional[int] = None,
        staff_ids: Optional[Iterable[int]] = None,
        adjustments: Optional[Mapping[int, PayAdjustment]] = None,
    ) -> ProcessingResult:
        """Rebuild draft, calculated and error records of a processing period."""
        period = self.get_period(period_id)
        if period.status != PeriodStatus.PROCESSING:
            raise ValidationError("Only a period in processing can be recalculated")

        rates = self._statutory.rates_for(period.end_date)
        slabs = self._statutory.slabs_for(period.end_date)

        wanted = None if staff_ids is None else {int(s) for s in staff_ids}
        errors: list[ProcessingError] = []
        success = 0
        for record in self._payroll.list_records(period.period_id):
            if record.status not in _RECALCULABLE:
                continue
            if wanted is not None and record.staff_id not in wanted:
                continue
            if self._calculate_one(
                period,
                record.staff_id,
                record_id=record.record_id,
                rates=rates,
                slabs=slabs,
                adjustment=(adjustments or {}).get(record.staff_id),
                acting_user_id=acting_user_id,
                errors=errors,
                current=record.status,
            ):
                success += 1

        self._recompute_totals(period.period_id)
        logger.info("Recalculated payroll period %s: %s ok, %s failed", period.period_id, success, len(errors))
        return ProcessingResult(success=success, errors=tuple(errors))

    def _calculate_one(
        self,
        period: PayrollPeriod,
        staff_id: int,
        *,
        record_id: int,
        rates: StatutoryRate,
        slabs: Sequence[TaxSlab],
        adjustment: Optional[PayAdjustment],
        acting_user_id: Optional[int],
        errors: list[ProcessingError],
        current: RecordStatus = RecordStatus.DRAFT,
    ) -> bool:
        """Build and store one record; the write only lands while the record is still `current`."""
        failure = None
        try:
            record = self._builder.build(
                period=period,
                staff_id=staff_id,
                rates=rates,
                slabs=slabs,
                record_id=record_id,
                adjustment=adjustment,
                acting_user_id=acting_user_id,
            )
        except DomainError as exc:
            logger.warning("Payroll for staff %s in period %s failed: %s", staff_id, period.period_id, exc)
            failure = str(exc)
        except Exception as exc:
            logger.exception("Unexpected error building payroll for staff %s in period %s", staff_id, period.period_id)
            failure = f"Unexpected error: {exc}"

        if failure is not None:
            record = error_record(
                period=period,
                staff_id=staff_id,
                message=failure,
                record_id=record_id,
                acting_user_id=acting_user_id,
            )

        check_record_transition(current, record.status)
        if not self._payroll.replace_record(record, from_status=current):
            latest = self.get_record(record_id)
            logger.warning(
                "Payroll record %s for staff %s moved to %s during calculation; left unchanged",
                record_id,
                staff_id,
                latest.status.value,
            )
            errors.append(ProcessingError(staff_id, f"Record is now {latest.status.value}; not recalculated"))
            return False

        if failure is not None:
            errors.append(ProcessingError(staff_id, failure))
            return False
        return True

    # Approval and payment

    def approve_period(self, period_id: int, *, acting_user_id: Optional[int] = None) -> PayrollPeriod:
        period = self.get_period(period_id)
        check_period_transition(period.status, PeriodStatus.APPROVED)

        records = self._payroll.list_records(period.period_id)
        if any(r.status == RecordStatus.DRAFT for r in records):
            raise ValidationError("Period still has records that were not calculated")

        self._advance(period, PeriodStatus.APPROVED, acting_user_id)
        for record in records:
            if record.status == RecordStatus.CALCULATED:
                self._payroll.transition_record(
                    record.record_id,
                    from_status=RecordStatus.CALCULATED,
                    to_status=RecordStatus.APPROVED,
                    acting_user_id=acting_user_id,
                )
        self._recompute_totals(period.period_id)
        return self.get_period(period.period_id)

    def mark_paid(
        self,
        period_id: int,
        *,
        acting_user_id: Optional[int] = None,
        payment_mode: str | PaymentMode = PaymentMode.BANK_TRANSFER,
        payment_reference: Optional[str] = None,
    ) -> PayrollPeriod:
        period = self.get_period(period_id)
        check_period_transition(period.status, PeriodStatus.PAID)
        mode = _payment_mode(payment_mode)

        self._advance(period, PeriodStatus.PAID, acting_user_id)
        paid_at = now_local()
        for record in self._payroll.list_records(period.period_id):
            if record.status != RecordStatus.APPROVED:
                continue
            self._pay(record, mode=mode, reference=payment_reference, acting_user_id=acting_user_id, at=paid_at)

        self._recompute_totals(period.period_id)
        return self.get_period(period.period_id)

    def lock_period(self, period_id: int, *, acting_user_id: Optional[int] = None) -> PayrollPeriod:
        period = self.get_period(period_id)
        self._advance(period, PeriodStatus.LOCKED, acting_user_id)
        self._recompute_totals(period.period_id)
        return self.get_period(period.period_id)

    def approve_record(self, record_id: int, *, acting_user_id: Optional[int] = None) -> PayrollRecord:
        record = self.get_record(record_id)
        period = self.get_period(record.period_id)
        if period.status not in (PeriodStatus.PROCESSING, PeriodStatus.APPROVED):
            raise ValidationError("Records can only be approved while the period is processing or approved")

        check_record_transition(record.status, RecordStatus.APPROVED)
        if not self._payroll.transition_record(
            record.record_id,
            from_status=record.status,
            to_status=RecordStatus.APPROVED,
            acting_user_id=acting_user_id,
        ):
            raise InvalidPeriodTransition(self.get_record(record.record_id).status, RecordStatus.APPROVED)

        self._recompute_totals(period.period_id)
        return self.get_record(record.record_id)

    def mark_record_paid(
        self,
        record_id: int,
        *,
        acting_user_id: Optional[int] = None,
        payment_mode: str | PaymentMode = PaymentMode.BANK_TRANSFER,
        payment_reference: Optional[str] = None,
    ) -> PayrollRecord:
        record = self.get_record(record_id)
        period = self.get_period(record.period_id)
        if period.status not in (PeriodStatus.APPROVED, PeriodStatus.PAID):
            raise ValidationError("Records can only be paid once the period is approved")

        check_record_transition(record.status, RecordStatus.PAID)
        self._pay(
            record,
            mode=_payment_mode(payment_mode),
            reference=payment_reference,
            acting_user_id=acting_user_id,
            at=now_local(),
        )
        self._recompute_totals(period.period_id)
        return self.get_record(record.record_id)

    def _pay(self, record: PayrollRecord, *, mode: PaymentMode, reference: Optional[str], acting_user_id, at) -> None:
        ok = self._payroll.transition_record(
            record.record_id,
            from_status=RecordStatus.APPROVED,
            to_status=RecordStatus.PAID,
            acting_user_id=acting_user_id,
            payment_mode=mode.value,
            payment_reference=(reference or "").strip() or None,
            at=at,
        )
        if not ok:
            raise InvalidPeriodTransition(self.get_record(record.record_id).status, RecordStatus.PAID)
        self._recover_advances(record)

    def _recover_advances(self, record: PayrollRecord) -> None:
        """Apply the advance installment withheld in `record` to open advances, oldest first."""
        left = record.salary_advance
        for advance in self._advances.list_open_for_staff(record.staff_id):
            if left <= ZERO:
                break
            amount = money(min(left, advance.next_installment()))
            if amount <= ZERO:
                continue
            self._advances.reduce_balance(advance.advance_id, amount=amount)
            left -= amount
        if left > ZERO:
            logger.warning("Staff %s: %s of withheld advance had no open balance", record.staff_id, left)


def _payment_mode(value: str | PaymentMode) -> PaymentMode:
    try:
        return PaymentMode(value)
    except ValueError:
        raise ValidationError(f"Unknown payment mode: {value}")

