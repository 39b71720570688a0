from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from ..core.enums import AdvanceStatus, TaxRegime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import SalaryAdvance, SalaryStructure
from .repository import SalaryAdvanceRepository, SalaryStructureRepository

_STRUCTURE_COLUMNS = """
    structure_id, staff_id, basic_salary, allowances, effective_from, effective_to,
    tax_regime, voluntary_pf, group_health_insurance, term_insurance, created_by
"""

_ADVANCE_COLUMNS = """
    advance_id, staff_id, requested_amount, reason, status, approved_amount,
    repayment_months, monthly_deduction, remaining_amount, approved_by
"""


def _load_allowances(raw) -> dict[str, Decimal]:
    if not raw:
        return {}
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    data = json.loads(raw) if isinstance(raw, str) else dict(raw)
    return {str(k): as_decimal(v) for k, v in data.items()}


def _dump_allowances(allowances: Mapping[str, Decimal]) -> str:
    # Amounts as strings so the JSON column never round-trips through float.
    return json.dumps({k: str(v) for k, v in allowances.items()}, sort_keys=True)


def _to_structure(r: dict) -> SalaryStructure:
    return SalaryStructure(
        structure_id=int(r["structure_id"]),
        staff_id=int(r["staff_id"]),
        basic_salary=as_decimal(r["basic_salary"]),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        allowances=_load_allowances(r.get("allowances")),
        tax_regime=TaxRegime(r.get("tax_regime") or TaxRegime.NEW.value),
        voluntary_pf=as_decimal(r.get("voluntary_pf")),
        group_health_insurance=as_decimal(r.get("group_health_insurance")),
        term_insurance=as_decimal(r.get("term_insurance")),
        created_by=r.get("created_by"),
    )


def _to_advance(r: dict) -> SalaryAdvance:
    return SalaryAdvance(
        advance_id=int(r["advance_id"]),
        staff_id=int(r["staff_id"]),
        requested_amount=as_decimal(r["requested_amount"]),
        status=AdvanceStatus(r["status"]),
        reason=r.get("reason"),
        approved_amount=as_decimal(r.get("approved_amount")),
        repayment_months=int(r.get("repayment_months") or 0),
        monthly_deduction=as_decimal(r.get("monthly_deduction")),
        remaining_amount=as_decimal(r.get("remaining_amount")),
        approved_by=r.get("approved_by"),
    )


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_staff(self, staff_id: int) -> Sequence[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STRUCTURE_COLUMNS} FROM salary_structures WHERE staff_id=%s ORDER BY effective_from DESC",
                (int(staff_id),),
            )
            return [_to_structure(r) for r in fetchall(cur)]

    def list_covering(self, staff_id: int, day: date) -> Sequence[SalaryStructure]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STRUCTURE_COLUMNS}
                FROM salary_structures
                WHERE staff_id=%s
                  AND effective_from <= %s
                  AND (effective_to IS NULL OR effective_to > %s)
                ORDER BY effective_from DESC
                """,
                (int(staff_id), day, day),
            )
            return [_to_structure(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        staff_id: int,
        basic_salary: Decimal,
        allowances: Mapping[str, Decimal],
        effective_from: date,
        effective_to: Optional[date],
        tax_regime: TaxRegime,
        voluntary_pf: Decimal,
        group_health_insurance: Decimal,
        term_insurance: Decimal,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_structures(
                    staff_id, basic_salary, allowances, effective_from, effective_to, tax_regime,
                    voluntary_pf, group_health_insurance, term_insurance, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(staff_id),
                    basic_salary,
                    _dump_allowances(allowances),
                    effective_from,
                    effective_to,
                    tax_regime.value,
                    voluntary_pf,
                    group_health_insurance,
                    term_insurance,
                    created_by,
                ),
            )
            return int(cur.lastrowid)

    def close_open_structures(self, staff_id: int, *, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_structures
                SET effective_to=%s
                WHERE staff_id=%s AND effective_to IS NULL AND effective_from < %s
                """,
                (end, int(staff_id), end),
            )
            return int(cur.rowcount)


class MySQLSalaryAdvanceRepository(SalaryAdvanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, advance_id: int) -> Optional[SalaryAdvance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ADVANCE_COLUMNS} FROM salary_advances WHERE advance_id=%s", (int(advance_id),))
            r = fetchone(cur)
            return _to_advance(r) if r else None

    def create(self, *, staff_id: int, requested_amount: Decimal, reason: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO salary_advances(staff_id, requested_amount, reason, status) VALUES(%s,%s,%s,%s)",
                (int(staff_id), requested_amount, reason, AdvanceStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def decide(
        self,
        *,
        advance_id: int,
        status: AdvanceStatus,
        decided_by: int,
        approved_amount: Decimal = Decimal("0.00"),
        repayment_months: int = 0,
        monthly_deduction: Decimal = Decimal("0.00"),
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_advances
                SET status=%s, approved_by=%s, approved_amount=%s, repayment_months=%s,
                    monthly_deduction=%s, remaining_amount=%s
                WHERE advance_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    approved_amount,
                    int(repayment_months),
                    monthly_deduction,
                    approved_amount,
                    int(advance_id),
                    AdvanceStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_open_for_staff(self, staff_id: int) -> Sequence[SalaryAdvance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ADVANCE_COLUMNS}
                FROM salary_advances
                WHERE staff_id=%s AND status=%s AND remaining_amount > 0
                ORDER BY advance_id
                """,
                (int(staff_id), AdvanceStatus.APPROVED.value),
            )
            return [_to_advance(r) for r in fetchall(cur)]

    def list_all(self, *, status: Optional[AdvanceStatus] = None, staff_id: Optional[int] = None) -> Sequence[SalaryAdvance]:
        clauses = ["1=1"]
        params: list[object] = []
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ADVANCE_COLUMNS} FROM salary_advances WHERE {' AND '.join(clauses)} ORDER BY advance_id DESC",
                tuple(params),
            )
            return [_to_advance(r) for r in fetchall(cur)]

    def reduce_balance(self, advance_id: int, *, amount: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_advances
                SET remaining_amount = remaining_amount - %s,
                    status = IF(remaining_amount <= 0, %s, status)
                WHERE advance_id=%s AND remaining_amount >= %s
                """,
                (amount, AdvanceStatus.RECOVERED.value, int(advance_id), amount),
            )
            return cur.rowcount > 0
