from __future__ import annotations

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import TaxRegime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, as_optional_decimal, db_cursor, fetchall, fetchone
from .model import StatutoryRate, TaxSlab
from .repository import StatutoryRateRepository, TaxSlabRepository

_RATE_FIELDS = (
    "pf_wage_limit",
    "pf_employee_rate",
    "pf_employer_rate",
    "epf_rate",
    "edli_rate",
    "pf_admin_rate",
    "esi_wage_limit",
    "esi_employee_rate",
    "esi_employer_rate",
    "pt_monthly_limit",
)
_RATE_COLUMNS = ", ".join(("rate_id", "effective_from") + _RATE_FIELDS)
_SLAB_COLUMNS = "slab_id, assessment_year, regime, slab_from, slab_to, rate, surcharge, cess, is_active"


def _to_rate(r: dict) -> StatutoryRate:
    return StatutoryRate(
        rate_id=int(r["rate_id"]),
        effective_from=r["effective_from"],
        **{f: as_decimal(r.get(f)) for f in _RATE_FIELDS},
    )


def _to_slab(r: dict) -> TaxSlab:
    return TaxSlab(
        slab_id=int(r["slab_id"]),
        assessment_year=r["assessment_year"],
        regime=TaxRegime(r["regime"]),
        slab_from=as_decimal(r["slab_from"]),
        slab_to=as_optional_decimal(r.get("slab_to")),
        rate=as_decimal(r["rate"]),
        surcharge=as_decimal(r.get("surcharge")),
        cess=as_decimal(r.get("cess")),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLStatutoryRateRepository(StatutoryRateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_effective(self, day: date) -> Optional[StatutoryRate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RATE_COLUMNS}
                FROM statutory_rates
                WHERE effective_from <= %s
                ORDER BY effective_from DESC, rate_id DESC
                LIMIT 1
                """,
                (day,),
            )
            r = fetchone(cur)
            return _to_rate(r) if r else None

    def list_all(self) -> Sequence[StatutoryRate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RATE_COLUMNS} FROM statutory_rates ORDER BY effective_from DESC")
            return [_to_rate(r) for r in fetchall(cur)]

    def create(self, rate: StatutoryRate) -> int:
        values = asdict(rate)
        columns = ("effective_from",) + _RATE_FIELDS
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO statutory_rates({', '.join(columns)}) VALUES({', '.join(['%s'] * len(columns))})",
                tuple(values[c] for c in columns),
            )
            return int(cur.lastrowid)


class MySQLTaxSlabRepository(TaxSlabRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for(self, *, assessment_year: str, regime: Optional[TaxRegime] = None) -> Sequence[TaxSlab]:
        clauses = ["assessment_year=%s", "is_active=1"]
        params: list[object] = [assessment_year]
        if regime is not None:
            clauses.append("regime=%s")
            params.append(regime.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SLAB_COLUMNS} FROM tax_slabs WHERE {' AND '.join(clauses)} ORDER BY regime, slab_from",
                tuple(params),
            )
            return [_to_slab(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        assessment_year: str,
        regime: TaxRegime,
        slab_from: Decimal,
        slab_to: Optional[Decimal],
        rate: Decimal,
        surcharge: Decimal,
        cess: Decimal,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tax_slabs(assessment_year, regime, slab_from, slab_to, rate, surcharge, cess, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (assessment_year, regime.value, slab_from, slab_to, rate, surcharge, cess),
            )
            return int(cur.lastrowid)
