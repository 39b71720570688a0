from datetime import time
from decimal import Decimal

import pytest

from src.hr_payroll.hr_payroll.common.policy import PayrollPolicy
from src.hr_payroll.hr_payroll.core.enums import MissingAttendancePolicy


def test_policy_defaults():
    policy = PayrollPolicy.from_settings(None)

    assert policy.office_start == time(9, 0)
    assert policy.standard_day_hours == Decimal("8")
    assert policy.weekly_off_days == (5, 6)
    assert policy.missing_attendance == MissingAttendancePolicy.ABSENT


def test_policy_from_settings():
    policy = PayrollPolicy.from_settings(
        {
            "OFFICE_START": "10:30",
            "LATE_GRACE_MINUTES": "15",
            "OVERTIME_MULTIPLIER": "2",
            "WEEKLY_OFF_DAYS": (6,),
            "MISSING_ATTENDANCE_POLICY": "exclude",
        }
    )

    assert policy.office_start == time(10, 30)
    assert policy.late_grace_minutes == 15
    assert policy.overtime_multiplier == Decimal("2")
    assert policy.weekly_off_days == (6,)
    assert policy.missing_attendance == MissingAttendancePolicy.EXCLUDE


def test_policy_rejects_unknown_missing_attendance_rule():
    with pytest.raises(ValueError):
        PayrollPolicy.from_settings({"MISSING_ATTENDANCE_POLICY": "ignore"})
