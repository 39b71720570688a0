from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..core import constants
from ..core.enums import MissingAttendancePolicy


@dataclass(frozen=True)
class PayrollPolicy:
    """Company-wide attendance and overtime rules.

    The office start and standard day length are global, not per employee or
    region.
    """

    office_start: time = constants.DEFAULT_OFFICE_START
    late_grace_minutes: int = constants.DEFAULT_LATE_GRACE_MINUTES
    standard_day_hours: Decimal = constants.DEFAULT_STANDARD_DAY_HOURS
    half_day_hours: Decimal = constants.DEFAULT_HALF_DAY_HOURS
    overtime_multiplier: Decimal = constants.DEFAULT_OVERTIME_MULTIPLIER
    weekly_off_days: tuple[int, ...] = constants.DEFAULT_WEEKLY_OFF_DAYS
    missing_attendance: MissingAttendancePolicy = MissingAttendancePolicy.ABSENT

    @classmethod
    def from_settings(cls, raw: Optional[Mapping[str, Any]]) -> "PayrollPolicy":
        raw = raw or {}
        default = cls()
        start = raw.get("OFFICE_START")
        return cls(
            office_start=datetime.strptime(start, "%H:%M").time() if start else default.office_start,
            late_grace_minutes=int(raw.get("LATE_GRACE_MINUTES", default.late_grace_minutes)),
            standard_day_hours=Decimal(str(raw.get("STANDARD_DAY_HOURS", default.standard_day_hours))),
            half_day_hours=Decimal(str(raw.get("HALF_DAY_HOURS", default.half_day_hours))),
            overtime_multiplier=Decimal(str(raw.get("OVERTIME_MULTIPLIER", default.overtime_multiplier))),
            weekly_off_days=tuple(int(d) for d in raw.get("WEEKLY_OFF_DAYS", default.weekly_off_days)),
            missing_attendance=MissingAttendancePolicy(
                raw.get("MISSING_ATTENDANCE_POLICY", default.missing_attendance.value)
            ),
        )
