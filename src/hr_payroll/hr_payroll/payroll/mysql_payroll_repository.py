from __future__ import annotations

import json
from dataclasses import asdict
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import PeriodStatus, RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import RECORD_MONEY_FIELDS, PayrollPeriod, PayrollRecord, PeriodTotals
from .repository import PayrollRepository

_PERIOD_COLUMNS = """
    period_id, name, start_date, end_date, status,
    total_employees, total_gross_pay, total_deductions, total_net_pay,
    created_by, processed_by, approved_by, paid_by,
    created_at, processed_at, approved_at, paid_at, locked_at
"""

_RECORD_META = (
    "record_id",
    "period_id",
    "staff_id",
    "status",
    "structure_id",
    "working_days",
    "present_days",
    "absent_days",
    "paid_leave_days",
    "late_days",
    "half_days",
    "overtime_hours",
    "allowances",
    "error_message",
    "payment_mode",
    "payment_reference",
    "paid_at",
    "calculated_by",
    "approved_by",
)
_RECORD_COLUMNS = ", ".join(_RECORD_META + RECORD_MONEY_FIELDS)

# Audit columns stamped when a period enters a status.
_PERIOD_AUDIT = {
    PeriodStatus.PROCESSING: ("processed_by", "processed_at"),
    PeriodStatus.APPROVED: ("approved_by", "approved_at"),
    PeriodStatus.PAID: ("paid_by", "paid_at"),
    PeriodStatus.LOCKED: (None, "locked_at"),
}


def _to_period(r: dict) -> PayrollPeriod:
    return PayrollPeriod(
        period_id=int(r["period_id"]),
        name=r["name"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=PeriodStatus(r["status"]),
        totals=PeriodTotals(
            total_employees=int(r.get("total_employees") or 0),
            total_gross_pay=as_decimal(r.get("total_gross_pay")),
            total_deductions=as_decimal(r.get("total_deductions")),
            total_net_pay=as_decimal(r.get("total_net_pay")),
        ),
        created_by=r.get("created_by"),
        processed_by=r.get("processed_by"),
        approved_by=r.get("approved_by"),
        paid_by=r.get("paid_by"),
        created_at=r.get("created_at"),
        processed_at=r.get("processed_at"),
        approved_at=r.get("approved_at"),
        paid_at=r.get("paid_at"),
        locked_at=r.get("locked_at"),
    )


def _to_record(r: dict) -> PayrollRecord:
    raw_allowances = r.get("allowances")
    if isinstance(raw_allowances, (bytes, bytearray)):
        raw_allowances = raw_allowances.decode("utf-8")
    allowances = json.loads(raw_allowances) if raw_allowances else {}

    return PayrollRecord(
        record_id=int(r["record_id"]),
        period_id=int(r["period_id"]),
        staff_id=int(r["staff_id"]),
        status=RecordStatus(r["status"]),
        structure_id=r.get("structure_id"),
        working_days=int(r.get("working_days") or 0),
        present_days=as_decimal(r.get("present_days")),
        absent_days=as_decimal(r.get("absent_days")),
        paid_leave_days=as_decimal(r.get("paid_leave_days")),
        late_days=int(r.get("late_days") or 0),
        half_days=int(r.get("half_days") or 0),
        overtime_hours=as_decimal(r.get("overtime_hours")),
        allowances={k: as_decimal(v) for k, v in allowances.items()},
        error_message=r.get("error_message"),
        payment_mode=r.get("payment_mode"),
        payment_reference=r.get("payment_reference"),
        paid_at=r.get("paid_at"),
        calculated_by=r.get("calculated_by"),
        approved_by=r.get("approved_by"),
        **{f: as_decimal(r.get(f)) for f in RECORD_MONEY_FIELDS},
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_period(self, *, name: str, start_date: date, end_date: date, created_by: Optional[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_periods(name, start_date, end_date, status, created_by)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (name, start_date, end_date, PeriodStatus.DRAFT.value, created_by),
            )
            return int(cur.lastrowid)

    def get_period(self, period_id: int) -> Optional[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PERIOD_COLUMNS} FROM payroll_periods WHERE period_id=%s", (int(period_id),))
            r = fetchone(cur)
            return _to_period(r) if r else None

    def list_periods(self, *, limit: int) -> Sequence[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PERIOD_COLUMNS} FROM payroll_periods ORDER BY start_date DESC LIMIT %s",
                (int(limit),),
            )
            return [_to_period(r) for r in fetchall(cur)]

    def list_overlapping(self, *, start: date, end: date) -> Sequence[PayrollPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PERIOD_COLUMNS} FROM payroll_periods WHERE start_date <= %s AND end_date >= %s",
                (end, start),
            )
            return [_to_period(r) for r in fetchall(cur)]

    def transition_period(
        self,
        period_id: int,
        *,
        from_status: PeriodStatus,
        to_status: PeriodStatus,
        acting_user_id: Optional[int],
        at: datetime,
    ) -> bool:
        user_col, at_col = _PERIOD_AUDIT[to_status]
        sets = ["status=%s", f"{at_col}=%s"]
        params: list[object] = [to_status.value, at]
        if user_col:
            sets.append(f"{user_col}=%s")
            params.append(acting_user_id)
        params.extend([int(period_id), from_status.value])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll_periods SET {', '.join(sets)} WHERE period_id=%s AND status=%s",
                tuple(params),
            )
            return cur.rowcount > 0

    def update_period_totals(self, period_id: int, totals: PeriodTotals) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payroll_periods
                SET total_employees=%s, total_gross_pay=%s, total_deductions=%s, total_net_pay=%s
                WHERE period_id=%s
                """,
                (
                    totals.total_employees,
                    totals.total_gross_pay,
                    totals.total_deductions,
                    totals.total_net_pay,
                    int(period_id),
                ),
            )

    def save_record(self, record: PayrollRecord) -> int:
        values = asdict(record)
        values["status"] = record.status.value
        values["allowances"] = json.dumps({k: str(v) for k, v in record.allowances.items()}, sort_keys=True)

        columns = [c for c in _RECORD_META if c != "record_id"] + list(RECORD_MONEY_FIELDS)
        updates = ", ".join(f"{c}=VALUES({c})" for c in columns if c not in ("period_id", "staff_id"))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO payroll_records({', '.join(columns)})
                VALUES({', '.join(['%s'] * len(columns))})
                ON DUPLICATE KEY UPDATE record_id=LAST_INSERT_ID(record_id), {updates}
                """,
                tuple(values[c] for c in columns),
            )
            return int(cur.lastrowid)

    def replace_record(self, record: PayrollRecord, *, from_status: RecordStatus) -> bool:
        values = asdict(record)
        values["status"] = record.status.value
        values["allowances"] = json.dumps({k: str(v) for k, v in record.allowances.items()}, sort_keys=True)

        columns = [c for c in _RECORD_META if c not in ("record_id", "period_id", "staff_id")] + list(RECORD_MONEY_FIELDS)
        params = [values[c] for c in columns] + [int(record.record_id), from_status.value]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll_records SET {', '.join(f'{c}=%s' for c in columns)} WHERE record_id=%s AND status=%s",
                tuple(params),
            )
            return cur.rowcount > 0

    def get_record(self, record_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM payroll_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_records(self, period_id: int) -> Sequence[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM payroll_records WHERE period_id=%s ORDER BY staff_id",
                (int(period_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        sets = ["status=%s"]
        params: list[object] = [to_status.value]
        if to_status == RecordStatus.APPROVED:
            sets.append("approved_by=%s")
            params.append(acting_user_id)
        if to_status == RecordStatus.PAID:
            sets.extend(["payment_mode=%s", "payment_reference=%s", "paid_at=%s"])
            params.extend([payment_mode, payment_reference, at])
        params.extend([int(record_id), from_status.value])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE payroll_records SET {', '.join(sets)} WHERE record_id=%s AND status=%s",
                tuple(params),
            )
            return cur.rowcount > 0
