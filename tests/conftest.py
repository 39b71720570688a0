from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from src.hr_payroll.hr_payroll.attendance.model import AttendanceRecord
from src.hr_payroll.hr_payroll.common.datetime_utils import iter_days
from src.hr_payroll.hr_payroll.common.policy import PayrollPolicy
from src.hr_payroll.hr_payroll.container import build_services
from src.hr_payroll.hr_payroll.core.enums import AdvanceStatus, AttendanceStatus, EmploymentType, RecordStatus, TaxRegime
from src.hr_payroll.hr_payroll.payroll.model import PayrollPeriod, PayrollRecord
from src.hr_payroll.hr_payroll.salary.model import SalaryAdvance, SalaryStructure
from src.hr_payroll.hr_payroll.staff.model import StaffMember
from src.hr_payroll.hr_payroll.statutory.model import StatutoryRate, TaxSlab


class InMemoryStaff:
    def __init__(self):
        self.members: dict[int, StaffMember] = {}
        self._id = 0

    def get_by_id(self, staff_id: int) -> Optional[StaffMember]:
        return self.members.get(int(staff_id))

    def count(self) -> int:
        return len(self.members)

    def create(self, *, employee_code, full_name, department, position, employment_type, join_date,
               bank_account=None, ifsc_code=None, pan=None) -> int:
        self._id += 1
        self.members[self._id] = StaffMember(
            staff_id=self._id,
            employee_code=employee_code,
            full_name=full_name,
            department=department,
            position=position,
            employment_type=employment_type,
            join_date=join_date,
            bank_account=bank_account,
            ifsc_code=ifsc_code,
            pan=pan,
        )
        return self._id

    def deactivate(self, staff_id: int, *, leave_date: date) -> bool:
        member = self.members.get(int(staff_id))
        if not member or not member.is_active:
            return False
        self.members[member.staff_id] = replace(member, is_active=False, leave_date=leave_date)
        return True

    def list_all(self, *, active_only: bool = False):
        return [m for m in self.members.values() if m.is_active or not active_only]

    def list_active_between(self, *, start: date, end: date):
        return [m for m in self.members.values() if m.is_active_between(start, end)]


class InMemoryAttendance:
    def __init__(self):
        self.rows: dict[tuple[int, date], AttendanceRecord] = {}
        self.range_queries = 0
        self._id = 0

    def get_for_staff_and_date(self, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self.rows.get((int(staff_id), work_date))

    def list_for_staff_between(self, staff_id: int, *, start: date, end: date):
        self.range_queries += 1
        return sorted(
            (r for (sid, day), r in self.rows.items() if sid == int(staff_id) and start <= day <= end),
            key=lambda r: r.work_date,
        )

    def create_login(self, *, staff_id, work_date, login_time, status, is_late, note=None) -> int:
        self._id += 1
        self.rows[(staff_id, work_date)] = AttendanceRecord(
            attendance_id=self._id,
            staff_id=staff_id,
            work_date=work_date,
            status=status,
            login_time=login_time,
            is_late=is_late,
            note=note,
        )
        return self._id

    def update_logout(self, *, attendance_id, logout_time, total_hours, overtime_hours, status, note=None) -> bool:
        for key, row in self.rows.items():
            if row.attendance_id == attendance_id:
                self.rows[key] = replace(
                    row,
                    logout_time=logout_time,
                    total_hours=total_hours,
                    overtime_hours=overtime_hours,
                    status=status,
                    note=note,
                )
                return True
        return False

    def upsert_manual(self, *, staff_id, work_date, status, total_hours, overtime_hours, is_late, note=None) -> int:
        existing = self.rows.get((staff_id, work_date))
        if existing:
            row_id = existing.attendance_id
        else:
            self._id += 1
            row_id = self._id
        self.rows[(staff_id, work_date)] = AttendanceRecord(
            attendance_id=row_id,
            staff_id=staff_id,
            work_date=work_date,
            status=status,
            total_hours=total_hours,
            overtime_hours=overtime_hours,
            is_late=is_late,
            note=note,
        )
        return row_id


class InMemoryStructures:
    def __init__(self):
        self.structures: dict[int, SalaryStructure] = {}
        self._id = 0

    def list_for_staff(self, staff_id: int):
        return sorted(
            (s for s in self.structures.values() if s.staff_id == int(staff_id)),
            key=lambda s: s.effective_from,
            reverse=True,
        )

    def list_covering(self, staff_id: int, day: date):
        return [s for s in self.list_for_staff(staff_id) if s.covers(day)]

    def create(self, *, staff_id, basic_salary, allowances, effective_from, effective_to, tax_regime,
               voluntary_pf, group_health_insurance, term_insurance, created_by) -> int:
        self._id += 1
        self.structures[self._id] = SalaryStructure(
            structure_id=self._id,
            staff_id=staff_id,
            basic_salary=basic_salary,
            effective_from=effective_from,
            effective_to=effective_to,
            allowances=dict(allowances),
            tax_regime=tax_regime,
            voluntary_pf=voluntary_pf,
            group_health_insurance=group_health_insurance,
            term_insurance=term_insurance,
            created_by=created_by,
        )
        return self._id

    def close_open_structures(self, staff_id: int, *, end: date) -> int:
        closed = 0
        for sid, s in list(self.structures.items()):
            if s.staff_id == int(staff_id) and s.effective_to is None and s.effective_from < end:
                self.structures[sid] = replace(s, effective_to=end)
                closed += 1
        return closed


class InMemoryAdvances:
    def __init__(self):
        self.advances: dict[int, SalaryAdvance] = {}
        self._id = 0

    def get(self, advance_id: int) -> Optional[SalaryAdvance]:
        return self.advances.get(int(advance_id))

    def create(self, *, staff_id, requested_amount, reason) -> int:
        self._id += 1
        self.advances[self._id] = SalaryAdvance(
            advance_id=self._id,
            staff_id=staff_id,
            requested_amount=requested_amount,
            status=AdvanceStatus.PENDING,
            reason=reason,
        )
        return self._id

    def decide(self, *, advance_id, status, decided_by, approved_amount=Decimal("0.00"), repayment_months=0,
               monthly_deduction=Decimal("0.00")) -> bool:
        advance = self.advances.get(int(advance_id))
        if not advance or advance.status != AdvanceStatus.PENDING:
            return False
        self.advances[advance.advance_id] = replace(
            advance,
            status=status,
            approved_by=decided_by,
            approved_amount=approved_amount,
            repayment_months=repayment_months,
            monthly_deduction=monthly_deduction,
            remaining_amount=approved_amount,
        )
        return True

    def list_open_for_staff(self, staff_id: int):
        return [
            a
            for a in sorted(self.advances.values(), key=lambda a: a.advance_id)
            if a.staff_id == int(staff_id) and a.status == AdvanceStatus.APPROVED and a.remaining_amount > 0
        ]

    def list_all(self, *, status=None, staff_id=None):
        return [
            a
            for a in self.advances.values()
            if (status is None or a.status == status) and (staff_id is None or a.staff_id == staff_id)
        ]

    def reduce_balance(self, advance_id: int, *, amount: Decimal) -> bool:
        advance = self.advances[int(advance_id)]
        remaining = advance.remaining_amount - amount
        self.advances[advance.advance_id] = replace(
            advance,
            remaining_amount=remaining,
            status=AdvanceStatus.RECOVERED if remaining <= 0 else advance.status,
        )
        return True


class InMemoryRates:
    def __init__(self):
        self.rates: dict[int, StatutoryRate] = {}

    def get_effective(self, day: date) -> Optional[StatutoryRate]:
        candidates = [r for r in self.rates.values() if r.effective_from <= day]
        return max(candidates, key=lambda r: r.effective_from) if candidates else None

    def list_all(self):
        return sorted(self.rates.values(), key=lambda r: r.effective_from, reverse=True)

    def create(self, rate: StatutoryRate) -> int:
        rate_id = len(self.rates) + 1
        self.rates[rate_id] = replace(rate, rate_id=rate_id)
        return rate_id


class InMemorySlabs:
    def __init__(self):
        self.slabs: list[TaxSlab] = []

    def list_for(self, *, assessment_year: str, regime=None):
        return [
            s
            for s in self.slabs
            if s.assessment_year == assessment_year and (regime is None or s.regime == regime)
        ]

    def create(self, *, assessment_year, regime, slab_from, slab_to, rate, surcharge, cess) -> int:
        slab_id = len(self.slabs) + 1
        self.slabs.append(
            TaxSlab(
                slab_id=slab_id,
                assessment_year=assessment_year,
                regime=regime,
                slab_from=slab_from,
                slab_to=slab_to,
                rate=rate,
                surcharge=surcharge,
                cess=cess,
            )
        )
        return slab_id


class InMemoryPayroll:
    def __init__(self):
        self.periods: dict[int, PayrollPeriod] = {}
        self.records: dict[int, PayrollRecord] = {}
        self._period_id = 0
        self._record_id = 0

    def create_period(self, *, name, start_date, end_date, created_by) -> int:
        self._period_id += 1
        self.periods[self._period_id] = PayrollPeriod(
            period_id=self._period_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            created_by=created_by,
        )
        return self._period_id

    def get_period(self, period_id: int) -> Optional[PayrollPeriod]:
        return self.periods.get(int(period_id))

    def list_periods(self, *, limit: int):
        return sorted(self.periods.values(), key=lambda p: p.start_date, reverse=True)[:limit]

    def list_overlapping(self, *, start: date, end: date):
        return [p for p in self.periods.values() if p.overlaps(start, end)]

    def transition_period(self, period_id, *, from_status, to_status, acting_user_id, at) -> bool:
        period = self.periods.get(int(period_id))
        if not period or period.status != from_status:
            return False
        self.periods[period.period_id] = replace(period, status=to_status)
        return True

    def update_period_totals(self, period_id, totals) -> None:
        self.periods[int(period_id)] = replace(self.periods[int(period_id)], totals=totals)

    def save_record(self, record: PayrollRecord) -> int:
        existing = next(
            (r for r in self.records.values() if r.period_id == record.period_id and r.staff_id == record.staff_id),
            None,
        )
        if existing:
            record_id = existing.record_id
        else:
            self._record_id += 1
            record_id = self._record_id
        self.records[record_id] = replace(record, record_id=record_id)
        return record_id

    def replace_record(self, record: PayrollRecord, *, from_status) -> bool:
        existing = self.records.get(int(record.record_id))
        if not existing or existing.status != from_status:
            return False
        self.records[existing.record_id] = replace(
            record,
            record_id=existing.record_id,
            period_id=existing.period_id,
            staff_id=existing.staff_id,
        )
        return True

    def get_record(self, record_id: int) -> Optional[PayrollRecord]:
        return self.records.get(int(record_id))

    def list_records(self, period_id: int):
        return sorted((r for r in self.records.values() if r.period_id == int(period_id)), key=lambda r: r.staff_id)

    def transition_record(self, record_id, *, from_status, to_status, acting_user_id, payment_mode=None,
                          payment_reference=None, at=None) -> bool:
        record = self.records.get(int(record_id))
        if not record or record.status != from_status:
            return False
        changes = {"status": to_status}
        if to_status == RecordStatus.APPROVED:
            changes["approved_by"] = acting_user_id
        if to_status == RecordStatus.PAID:
            changes.update(payment_mode=payment_mode, payment_reference=payment_reference, paid_at=at)
        self.records[record.record_id] = replace(record, **changes)
        return True


def default_rates(effective_from: date = date(2024, 4, 1)) -> StatutoryRate:
    return StatutoryRate(rate_id=0, effective_from=effective_from)


def new_regime_slabs(assessment_year: str, *, cess: str = "4") -> list[TaxSlab]:
    rows = [
        ("0", "400000", "0"),
        ("400000", "800000", "5"),
        ("800000", "1200000", "10"),
        ("1200000", "1600000", "15"),
        ("1600000", "2000000", "20"),
        ("2000000", "2400000", "25"),
        ("2400000", None, "30"),
    ]
    return [
        TaxSlab(
            slab_id=i + 1,
            assessment_year=assessment_year,
            regime=TaxRegime.NEW,
            slab_from=Decimal(lo),
            slab_to=Decimal(hi) if hi else None,
            rate=Decimal(rate),
            cess=Decimal(cess),
        )
        for i, (lo, hi, rate) in enumerate(rows)
    ]


def old_regime_slabs(assessment_year: str) -> list[TaxSlab]:
    rows = [("0", "250000", "0"), ("250000", "500000", "5"), ("500000", "1000000", "20"), ("1000000", None, "30")]
    return [
        TaxSlab(
            slab_id=100 + i,
            assessment_year=assessment_year,
            regime=TaxRegime.OLD,
            slab_from=Decimal(lo),
            slab_to=Decimal(hi) if hi else None,
            rate=Decimal(rate),
            cess=Decimal("4"),
        )
        for i, (lo, hi, rate) in enumerate(rows)
    ]


class Seeder:
    """Shortcuts for putting staff, salary, attendance and rate tables in place."""

    def __init__(self, container):
        self.c = container

    def staff(self, name: str, *, join_date: date = date(2024, 1, 1), bank_account: Optional[str] = "0011223344"):
        return self.c.staff_service.hire(
            full_name=name,
            join_date=join_date,
            department="Engineering",
            employment_type=EmploymentType.FULL_TIME,
            bank_account=bank_account,
            ifsc_code="hdfc0001234",
        )

    def structure(self, staff_id: int, basic, *, allowances=None, effective_from: date = date(2024, 1, 1), **kwargs):
        return self.c.salary_service.create_structure(
            staff_id=staff_id,
            basic_salary=basic,
            effective_from=effective_from,
            allowances=allowances or {},
            **kwargs,
        )

    def attend(self, staff_id: int, start: date, end: date, *, status=AttendanceStatus.PRESENT, skip=()):
        """Mark every working day in [start, end] except `skip`."""
        for day in iter_days(start, end):
            if day.weekday() in self.c.policy.weekly_off_days or day in skip:
                continue
            hours = Decimal("0") if status in (AttendanceStatus.ABSENT, AttendanceStatus.LEAVE) else Decimal("8")
            self.c.attendance_service.record_manual(
                staff_id=staff_id,
                work_date=day,
                status=status,
                total_hours=hours,
            )

    def rate_tables(self, *assessment_years: str):
        self.c.rates_repo.create(default_rates())
        for year in assessment_years:
            self.c.slabs_repo.slabs.extend(new_regime_slabs(year))
            self.c.slabs_repo.slabs.extend(old_regime_slabs(year))


@pytest.fixture
def container():
    return build_services(
        staff_repo=InMemoryStaff(),
        attendance_repo=InMemoryAttendance(),
        structures_repo=InMemoryStructures(),
        advances_repo=InMemoryAdvances(),
        rates_repo=InMemoryRates(),
        slabs_repo=InMemorySlabs(),
        payroll_repo=InMemoryPayroll(),
        policy=PayrollPolicy(),
    )


@pytest.fixture
def seed(container):
    return Seeder(container)


@pytest.fixture
def april_2025():
    """A month with 22 Monday-to-Friday working days."""
    return date(2025, 4, 1), date(2025, 4, 30)


@pytest.fixture
def rates():
    return default_rates()


@pytest.fixture
def slabs():
    """Both regimes for assessment year 2026-27 (financial year 2025-26)."""
    return new_regime_slabs("2026-27") + old_regime_slabs("2026-27")
