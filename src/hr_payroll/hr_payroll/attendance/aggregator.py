from __future__ import annotations

from collections import OrderedDict
from datetime import date
from decimal import Decimal

from ..common.datetime_utils import working_days
from ..common.policy import PayrollPolicy
from ..common.validators import require_date_range
from ..core.enums import AttendanceStatus, MissingAttendancePolicy
from .model import AttendanceSummary
from .repository import AttendanceRepository

_ONE = Decimal("1")
_HALF = Decimal("0.5")
_PRESENT_STATUSES = {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.REMOTE}
_CACHE_SIZE = 512


class AttendanceAggregator:
    """Reduces daily attendance rows into a per-period summary.

    `summarize` serves read-only views from a bounded per-process cache keyed
    by (staff_id, start, end); the attendance service calls `invalidate` on
    every write it makes. Payroll uses `compute`, which always reads the
    repository, since rows may also be written by other workers.
    """

    def __init__(self, attendance: AttendanceRepository, *, policy: PayrollPolicy | None = None,
                 cache_size: int = _CACHE_SIZE):
        self._attendance = attendance
        self._policy = policy or PayrollPolicy()
        self._cache_size = cache_size
        self._cache: OrderedDict[tuple[int, date, date], AttendanceSummary] = OrderedDict()

    def summarize(self, staff_id: int, *, start: date, end: date) -> AttendanceSummary:
        require_date_range(start, end, "attendance range")
        key = (int(staff_id), start, end)
        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            return cached

        summary = self._compute(int(staff_id), start, end)
        self._cache[key] = summary
        while len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
        return summary

    def compute(self, staff_id: int, *, start: date, end: date) -> AttendanceSummary:
        """Fresh summary straight from the repository; refreshes the cached copy."""
        require_date_range(start, end, "attendance range")
        self.invalidate(staff_id)
        return self.summarize(staff_id, start=start, end=end)

    def invalidate(self, staff_id: int) -> None:
        for key in [k for k in self._cache if k[0] == int(staff_id)]:
            del self._cache[key]

    def _compute(self, staff_id: int, start: date, end: date) -> AttendanceSummary:
        days = working_days(start, end, self._policy.weekly_off_days)
        workdays = set(days)
        records = self._attendance.list_for_staff_between(staff_id, start=start, end=end)

        present = absent = paid_leave = Decimal("0")
        late = half = remote = 0
        total_hours = overtime_hours = Decimal("0.00")
        seen: set[date] = set()

        for r in records:
            total_hours += r.total_hours
            overtime_hours += r.overtime_hours
            if r.work_date not in workdays:
                # Weekend work earns hours/overtime but does not shift day counts.
                continue
            seen.add(r.work_date)

            if r.status in _PRESENT_STATUSES:
                present += _ONE
            elif r.status == AttendanceStatus.HALF_DAY:
                present += _HALF
                absent += _HALF
                half += 1
            elif r.status == AttendanceStatus.LEAVE:
                paid_leave += _ONE
            else:
                absent += _ONE

            if r.status == AttendanceStatus.LATE or r.is_late:
                late += 1
            if r.status == AttendanceStatus.REMOTE:
                remote += 1

        missing = len(workdays - seen)
        counted_days = len(days)
        if self._policy.missing_attendance == MissingAttendancePolicy.ABSENT:
            absent += Decimal(missing)
        else:
            counted_days -= missing

        return AttendanceSummary(
            staff_id=staff_id,
            start_date=start,
            end_date=end,
            working_days=counted_days,
            present_days=present,
            absent_days=absent,
            paid_leave_days=paid_leave,
            late_days=late,
            half_days=half,
            remote_days=remote,
            missing_days=missing,
            total_hours=total_hours,
            overtime_hours=overtime_hours,
        )
