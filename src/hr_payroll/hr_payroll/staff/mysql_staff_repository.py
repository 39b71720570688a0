from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import EmploymentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StaffMember
from .repository import StaffRepository

_COLUMNS = """
    staff_id, employee_code, full_name, department, position, employment_type,
    join_date, leave_date, is_active, bank_account, ifsc_code, pan
"""


def _to_staff(r: dict) -> StaffMember:
    return StaffMember(
        staff_id=int(r["staff_id"]),
        employee_code=r["employee_code"],
        full_name=r["full_name"],
        department=r.get("department"),
        position=r.get("position"),
        employment_type=EmploymentType(r["employment_type"]),
        join_date=r["join_date"],
        leave_date=r.get("leave_date"),
        is_active=bool(r.get("is_active", True)),
        bank_account=r.get("bank_account"),
        ifsc_code=r.get("ifsc_code"),
        pan=r.get("pan"),
    )


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, staff_id: int) -> Optional[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff_members WHERE staff_id=%s", (int(staff_id),))
            row = fetchone(cur)
            return _to_staff(row) if row else None

    def count(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM staff_members")
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def create(
        self,
        *,
        employee_code: str,
        full_name: str,
        department: Optional[str],
        position: Optional[str],
        employment_type: EmploymentType,
        join_date: date,
        bank_account: Optional[str] = None,
        ifsc_code: Optional[str] = None,
        pan: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO staff_members(
                    employee_code, full_name, department, position, employment_type,
                    join_date, is_active, bank_account, ifsc_code, pan
                )
                VALUES(%s,%s,%s,%s,%s,%s,1,%s,%s,%s)
                """,
                (
                    employee_code,
                    full_name,
                    department,
                    position,
                    employment_type.value,
                    join_date,
                    bank_account,
                    ifsc_code,
                    pan,
                ),
            )
            return int(cur.lastrowid)

    def deactivate(self, staff_id: int, *, leave_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE staff_members SET is_active=0, leave_date=%s WHERE staff_id=%s AND is_active=1",
                (leave_date, int(staff_id)),
            )
            return cur.rowcount > 0

    def list_all(self, *, active_only: bool = False) -> Sequence[StaffMember]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff_members {where} ORDER BY full_name")
            return [_to_staff(r) for r in fetchall(cur)]

    def list_active_between(self, *, start: date, end: date) -> Sequence[StaffMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_members
                WHERE join_date <= %s
                  AND (leave_date IS NULL OR leave_date >= %s)
                ORDER BY staff_id
                """,
                (end, start),
            )
            return [_to_staff(r) for r in fetchall(cur)]
