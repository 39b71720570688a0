from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PeriodStatus, RecordStatus
from .model import PayrollPeriod, PayrollRecord, PeriodTotals


class PayrollRepository(Protocol):
    """Persistence for payroll periods and their child records."""

    def create_period(self, *, name: str, start_date: date, end_date: date, created_by: Optional[int]) -> int:
        raise NotImplementedError

    def get_period(self, period_id: int) -> Optional[PayrollPeriod]:
        raise NotImplementedError

    def list_periods(self, *, limit: int) -> Sequence[PayrollPeriod]:
        raise NotImplementedError

    def list_overlapping(self, *, start: date, end: date) -> Sequence[PayrollPeriod]:
        raise NotImplementedError

    def transition_period(
        self,
        period_id: int,
        *,
        from_status: PeriodStatus,
        to_status: PeriodStatus,
        acting_user_id: Optional[int],
        at: datetime,
    ) -> bool:
        """Conditional update: succeeds only while the period is still `from_status`."""

        raise NotImplementedError

    def update_period_totals(self, period_id: int, totals: PeriodTotals) -> None:
        raise NotImplementedError

    def save_record(self, record: PayrollRecord) -> int:
        """Insert the record of (period_id, staff_id), or replace it in place; returns its id.

        Only used for draft placeholders of a period that has just entered processing.
        """

        raise NotImplementedError

    def replace_record(self, record: PayrollRecord, *, from_status: RecordStatus) -> bool:
        """Overwrite amounts and status of `record.record_id` while it is still `from_status`."""

        raise NotImplementedError

    def get_record(self, record_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def list_records(self, period_id: int) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def transition_record(
        self,
        record_id: int,
        *,
        from_status: RecordStatus,
        to_status: RecordStatus,
        acting_user_id: Optional[int],
        payment_mode: Optional[str] = None,
        payment_reference: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> bool:
        raise NotImplementedError
