from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.hr_payroll.hr_payroll.core.enums import AttendanceStatus
from src.hr_payroll.hr_payroll.core.exceptions import ValidationError


def test_on_time_login_then_long_day_records_overtime(container, seed):
    member = seed.staff("Asha Rao")
    service = container.attendance_service

    record = service.record_login(member.staff_id, now=datetime(2025, 4, 1, 8, 55))
    assert record.status == AttendanceStatus.PRESENT
    assert record.is_late is False

    record = service.record_logout(member.staff_id, now=datetime(2025, 4, 1, 18, 55))
    assert record.total_hours == Decimal("10.00")
    assert record.overtime_hours == Decimal("2.00")
    assert record.status == AttendanceStatus.PRESENT


def test_late_login_is_flagged(container, seed):
    member = seed.staff("Asha Rao")

    record = container.attendance_service.record_login(member.staff_id, now=datetime(2025, 4, 1, 9, 30))

    assert record.status == AttendanceStatus.LATE
    assert record.is_late is True


def test_remote_login_keeps_remote_status(container, seed):
    member = seed.staff("Asha Rao")

    record = container.attendance_service.record_login(member.staff_id, now=datetime(2025, 4, 1, 9, 30), remote=True)

    assert record.status == AttendanceStatus.REMOTE
    assert record.is_late is True


def test_short_day_becomes_half_day(container, seed):
    member = seed.staff("Asha Rao")
    service = container.attendance_service
    service.record_login(member.staff_id, now=datetime(2025, 4, 1, 9, 0))

    record = service.record_logout(member.staff_id, now=datetime(2025, 4, 1, 12, 0))

    assert record.status == AttendanceStatus.HALF_DAY
    assert record.overtime_hours == Decimal("0.00")


def test_second_login_same_day_is_rejected(container, seed):
    member = seed.staff("Asha Rao")
    service = container.attendance_service
    service.record_login(member.staff_id, now=datetime(2025, 4, 1, 9, 0))

    with pytest.raises(ValidationError):
        service.record_login(member.staff_id, now=datetime(2025, 4, 1, 13, 0))


def test_logout_requires_login_and_only_once(container, seed):
    member = seed.staff("Asha Rao")
    service = container.attendance_service

    with pytest.raises(ValidationError):
        service.record_logout(member.staff_id, now=datetime(2025, 4, 1, 18, 0))

    service.record_login(member.staff_id, now=datetime(2025, 4, 1, 9, 0))
    service.record_logout(member.staff_id, now=datetime(2025, 4, 1, 18, 0))
    with pytest.raises(ValidationError):
        service.record_logout(member.staff_id, now=datetime(2025, 4, 1, 19, 0))


def test_inactive_staff_cannot_clock_in(container, seed):
    member = seed.staff("Asha Rao")
    container.staff_service.deactivate(member.staff_id, leave_date=date(2025, 3, 31))

    with pytest.raises(ValidationError):
        container.attendance_service.record_login(member.staff_id, now=datetime(2025, 4, 1, 9, 0))


def test_manual_entry_validation(container, seed):
    member = seed.staff("Asha Rao")
    service = container.attendance_service

    with pytest.raises(ValidationError):
        service.record_manual(staff_id=member.staff_id, work_date=date(2025, 4, 1), status="sick")
    with pytest.raises(ValidationError):
        service.record_manual(staff_id=member.staff_id, work_date=date(2025, 4, 1), status="absent", total_hours=2)
    with pytest.raises(ValidationError):
        service.record_manual(
            staff_id=member.staff_id, work_date=date(2025, 4, 1), status="present", total_hours=8, overtime_hours=9
        )


def test_manual_entry_replaces_existing_row(container, seed):
    member = seed.staff("Asha Rao")
    service = container.attendance_service
    service.record_login(member.staff_id, now=datetime(2025, 4, 1, 9, 0))

    record = service.record_manual(staff_id=member.staff_id, work_date=date(2025, 4, 1), status="leave")

    assert record.status == AttendanceStatus.LEAVE
    assert len(container.attendance_repo.rows) == 1
