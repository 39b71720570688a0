from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hr_payroll.hr_payroll.core.enums import EmploymentType, RecordStatus
from src.hr_payroll.hr_payroll.core.exceptions import ValidationError
from src.hr_payroll.hr_payroll.payroll.export import bank_file_rows, payslip_summary, register_frame
from src.hr_payroll.hr_payroll.payroll.model import PayrollRecord
from src.hr_payroll.hr_payroll.staff.model import StaffMember


def _member(staff_id: int, bank_account="0011223344") -> StaffMember:
    return StaffMember(
        staff_id=staff_id,
        employee_code=f"EMP{staff_id:03d}",
        full_name=f"Staff {staff_id}",
        department="Finance",
        position=None,
        employment_type=EmploymentType.FULL_TIME,
        join_date=date(2024, 1, 1),
        bank_account=bank_account,
        ifsc_code="HDFC0001234",
    )


def _record(staff_id: int, status=RecordStatus.APPROVED, net="26181.82") -> PayrollRecord:
    return PayrollRecord(
        record_id=staff_id,
        period_id=1,
        staff_id=staff_id,
        status=status,
        working_days=22,
        present_days=Decimal("20"),
        gross_earnings=Decimal("28181.82"),
        pf_employee=Decimal("1800.00"),
        pf_employer=Decimal("2040.00"),
        professional_tax=Decimal("200.00"),
        total_deductions=Decimal("2000.00"),
        net_pay=Decimal(net),
    )


def test_payslip_summary_breakdown_and_ratios():
    summary = payslip_summary(_record(1))

    assert summary["deduction_breakdown"]["statutory"]["pf"] == Decimal("1800.00")
    assert summary["deduction_breakdown"]["statutory"]["professional_tax"] == Decimal("200.00")
    assert summary["employer_contributions"]["pf"] == Decimal("2040.00")
    assert summary["take_home_percentage"] == Decimal("92.90")
    assert summary["attendance_percentage"] == Decimal("90.91")


def test_bank_rows_only_for_payable_records_with_accounts():
    records = [
        _record(1),
        _record(2, status=RecordStatus.ERROR, net="0"),
        _record(3, net="0"),
        _record(4),
        _record(5, status=RecordStatus.PAID),
    ]
    staff = {1: _member(1), 3: _member(3), 4: _member(4, bank_account=None), 5: _member(5)}

    rows = bank_file_rows(records, staff)

    assert [r["employee_code"] for r in rows] == ["EMP001", "EMP005"]
    assert rows[0]["amount"] == "26181.82"


def test_register_frame_uses_display_headers():
    frame = register_frame([_record(1)], {1: _member(1)})

    assert list(frame.columns)[:3] == ["Employee Code", "Name", "Department"]
    assert frame.loc[0, "Net Pay"] == pytest.approx(26181.82)
    assert frame.loc[0, "Status"] == "approved"


def test_bank_file_and_register_through_service(container, seed, april_2025):
    start, end = april_2025
    seed.rate_tables("2026-27")
    member = seed.staff("Asha Rao")
    seed.structure(member.staff_id, "20000", allowances={"hra": "8000"})
    seed.attend(member.staff_id, start, end)
    service = container.payroll_service
    period = service.create_period(name="April 2025", start_date=start, end_date=end)
    service.process_period(period.period_id, acting_user_id=1)

    with pytest.raises(ValidationError):
        container.export_service.bank_file(period.period_id)

    service.approve_period(period.period_id, acting_user_id=1)
    filename, payload = container.export_service.bank_file(period.period_id)
    assert filename == f"bank_transfer_202504_{period.period_id}.csv"
    text = payload.decode("utf-8-sig")
    assert text.splitlines()[0] == "employee_code,full_name,bank_account,ifsc_code,amount,payment_reference"
    assert "EMP001,Asha Rao,0011223344,HDFC0001234" in text

    filename, payload = container.export_service.register_xlsx(period.period_id)
    assert filename.endswith(".xlsx")
    assert payload[:2] == b"PK"


def test_payslip_rejects_failed_records(container, seed, april_2025):
    start, end = april_2025
    seed.rate_tables("2026-27")
    member = seed.staff("No Structure")
    seed.attend(member.staff_id, start, end)
    service = container.payroll_service
    period = service.create_period(name="April 2025", start_date=start, end_date=end)
    service.process_period(period.period_id, acting_user_id=1)
    record = service.get_period_detail(period.period_id).records[0]

    with pytest.raises(ValidationError):
        container.export_service.payslip(record.record_id)
