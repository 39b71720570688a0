from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, staff_id, work_date, login_time, logout_time,
    total_hours, overtime_hours, status, is_late, note
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        login_time=r.get("login_time"),
        logout_time=r.get("logout_time"),
        total_hours=as_decimal(r.get("total_hours")),
        overtime_hours=as_decimal(r.get("overtime_hours")),
        is_late=bool(r.get("is_late")),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_staff_and_date(self, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE staff_id=%s AND work_date=%s",
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_staff_between(self, staff_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE staff_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date
                """,
                (int(staff_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_login(
        self,
        *,
        staff_id: int,
        work_date: date,
        login_time: datetime,
        status: AttendanceStatus,
        is_late: bool,
        note: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(staff_id, work_date, login_time, status, is_late, note)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(staff_id), work_date, login_time, status.value, int(is_late), note),
            )
            return int(cur.lastrowid)

    def update_logout(
        self,
        *,
        attendance_id: int,
        logout_time: datetime,
        total_hours: Decimal,
        overtime_hours: Decimal,
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET logout_time=%s, total_hours=%s, overtime_hours=%s, status=%s, note=%s
                WHERE attendance_id=%s AND logout_time IS NULL
                """,
                (logout_time, total_hours, overtime_hours, status.value, note, int(attendance_id)),
            )
            return cur.rowcount > 0

    def upsert_manual(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: AttendanceStatus,
        total_hours: Decimal,
        overtime_hours: Decimal,
        is_late: bool,
        note: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(staff_id, work_date, status, total_hours, overtime_hours, is_late, note)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    status=VALUES(status),
                    total_hours=VALUES(total_hours),
                    overtime_hours=VALUES(overtime_hours),
                    is_late=VALUES(is_late),
                    note=VALUES(note)
                """,
                (int(staff_id), work_date, status.value, total_hours, overtime_hours, int(is_late), note),
            )
            return int(cur.lastrowid)
