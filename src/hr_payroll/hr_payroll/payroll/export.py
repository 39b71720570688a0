from __future__ import annotations

import csv
import io
import logging
from decimal import Decimal
from typing import Mapping, Sequence

import pandas as pd

from ..common.money import HUNDRED, ZERO, money
from ..core.enums import PeriodStatus, RecordStatus
from ..core.exceptions import ValidationError
from ..staff.model import StaffMember
from ..staff.repository import StaffRepository
from .model import PayrollRecord
from .service import PayrollPeriodService

logger = logging.getLogger(__name__)

BANK_FILE_COLUMNS = [
    "employee_code",
    "full_name",
    "bank_account",
    "ifsc_code",
    "amount",
    "payment_reference",
]

REGISTER_COLUMNS = [
    ("employee_code", "Employee Code"),
    ("full_name", "Name"),
    ("department", "Department"),
    ("working_days", "Working Days"),
    ("present_days", "Present Days"),
    ("absent_days", "Absent Days"),
    ("basic", "Basic"),
    ("total_allowances", "Allowances"),
    ("overtime_pay", "Overtime"),
    ("bonus", "Bonus"),
    ("arrears", "Arrears"),
    ("unpaid_leave_deduction", "Loss of Pay"),
    ("gross_earnings", "Gross"),
    ("pf_employee", "PF (Employee)"),
    ("pf_employer", "PF (Employer)"),
    ("esi_employee", "ESI (Employee)"),
    ("esi_employer", "ESI (Employer)"),
    ("tds", "TDS"),
    ("professional_tax", "Professional Tax"),
    ("other_deductions", "Other Deductions"),
    ("total_deductions", "Total Deductions"),
    ("net_pay", "Net Pay"),
    ("status", "Status"),
]

_BANK_FILE_PERIOD_STATUSES = (PeriodStatus.APPROVED, PeriodStatus.PAID, PeriodStatus.LOCKED)


def payslip_summary(record: PayrollRecord) -> dict:
    """Deduction breakdown and ratios shown on a salary slip."""
    gross = record.gross_earnings
    take_home = money(record.net_pay * HUNDRED / gross) if gross > 0 else ZERO
    attendance = (
        money(record.present_days * HUNDRED / Decimal(record.working_days)) if record.working_days else ZERO
    )
    return {
        "gross_earnings": record.gross_earnings,
        "total_deductions": record.total_deductions,
        "net_pay": record.net_pay,
        "deduction_breakdown": {
            "statutory": {
                "pf": record.pf_employee,
                "esi": record.esi_employee,
                "tds": record.tds,
                "professional_tax": record.professional_tax,
            },
            "insurance": record.insurance,
            "other": {
                "advance": record.salary_advance,
                "other": record.adjustment_deductions,
            },
        },
        "employer_contributions": {
            "pf": record.pf_employer,
            "esi": record.esi_employer,
        },
        "take_home_percentage": take_home,
        "attendance_percentage": attendance,
    }


def bank_file_rows(records: Sequence[PayrollRecord], staff: Mapping[int, StaffMember]) -> list[dict]:
    rows = []
    for record in records:
        if record.status not in (RecordStatus.APPROVED, RecordStatus.PAID) or record.net_pay <= 0:
            continue
        member = staff.get(record.staff_id)
        if member is None or not member.bank_account:
            logger.warning("Staff %s has no bank account; left out of bank file", record.staff_id)
            continue
        rows.append(
            {
                "employee_code": member.employee_code,
                "full_name": member.full_name,
                "bank_account": member.bank_account,
                "ifsc_code": member.ifsc_code or "",
                "amount": f"{record.net_pay:.2f}",
                "payment_reference": record.payment_reference or "",
            }
        )
    return rows


def write_bank_csv(rows: Sequence[dict]) -> bytes:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=BANK_FILE_COLUMNS)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return out.getvalue().encode("utf-8-sig")


def register_frame(records: Sequence[PayrollRecord], staff: Mapping[int, StaffMember]) -> pd.DataFrame:
    data = []
    for record in records:
        member = staff.get(record.staff_id)
        row = {
            "employee_code": member.employee_code if member else "",
            "full_name": member.full_name if member else f"#{record.staff_id}",
            "department": (member.department if member else None) or "-",
            "status": record.status.value,
        }
        for key, _ in REGISTER_COLUMNS:
            if key not in row:
                value = getattr(record, key)
                row[key] = float(value) if isinstance(value, Decimal) else value
        data.append(row)

    frame = pd.DataFrame(data, columns=[key for key, _ in REGISTER_COLUMNS])
    return frame.rename(columns=dict(REGISTER_COLUMNS))


def write_register_xlsx(frame: pd.DataFrame, *, sheet_name: str = "Payroll") -> bytes:
    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=sheet_name)
    return out.getvalue()


class PayrollExportService:
    """Payslips, bank transfer files and the Excel payroll register."""

    def __init__(self, periods: PayrollPeriodService, staff: StaffRepository):
        self._periods = periods
        self._staff = staff

    def _staff_map(self) -> dict[int, StaffMember]:
        return {m.staff_id: m for m in self._staff.list_all()}

    def payslip(self, record_id: int) -> tuple[PayrollRecord, StaffMember, dict]:
        record = self._periods.get_record(record_id)
        if record.status == RecordStatus.ERROR:
            raise ValidationError(f"Payroll record {record_id} failed: {record.error_message}")
        if record.status == RecordStatus.DRAFT:
            raise ValidationError(f"Payroll record {record_id} is not calculated yet")
        member = self._staff.get_by_id(record.staff_id)
        return record, member, payslip_summary(record)

    def bank_file(self, period_id: int) -> tuple[str, bytes]:
        detail = self._periods.get_period_detail(period_id)
        if detail.period.status not in _BANK_FILE_PERIOD_STATUSES:
            raise ValidationError("Bank file is available once the period is approved")
        rows = bank_file_rows(detail.records, self._staff_map())
        filename = f"bank_transfer_{detail.period.start_date:%Y%m}_{detail.period.period_id}.csv"
        return filename, write_bank_csv(rows)

    def register_xlsx(self, period_id: int) -> tuple[str, bytes]:
        detail = self._periods.get_period_detail(period_id)
        frame = register_frame(detail.records, self._staff_map())
        filename = f"payroll_register_{detail.period.start_date:%Y%m}_{detail.period.period_id}.xlsx"
        return filename, write_register_xlsx(frame)
