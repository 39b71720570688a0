from __future__ import annotations

from datetime import date
from decimal import Decimal

from src.hr_payroll.hr_payroll.attendance.aggregator import AttendanceAggregator
from src.hr_payroll.hr_payroll.common.policy import PayrollPolicy
from src.hr_payroll.hr_payroll.core.enums import AttendanceStatus, MissingAttendancePolicy


def test_missing_days_count_as_absent_by_default(container, seed, april_2025):
    start, end = april_2025
    member = seed.staff("Asha Rao")
    seed.attend(member.staff_id, start, end, skip={date(2025, 4, 29), date(2025, 4, 30)})

    summary = container.aggregator.summarize(member.staff_id, start=start, end=end)

    assert summary.working_days == 22
    assert summary.present_days == Decimal("20")
    assert summary.absent_days == Decimal("2")
    assert summary.missing_days == 2
    assert summary.paid_days == Decimal("20")


def test_missing_days_can_be_excluded(container, seed, april_2025):
    start, end = april_2025
    member = seed.staff("Asha Rao")
    seed.attend(member.staff_id, start, end, skip={date(2025, 4, 29), date(2025, 4, 30)})
    aggregator = AttendanceAggregator(
        container.attendance_repo,
        policy=PayrollPolicy(missing_attendance=MissingAttendancePolicy.EXCLUDE),
    )

    summary = aggregator.summarize(member.staff_id, start=start, end=end)

    assert summary.working_days == 20
    assert summary.absent_days == Decimal("0")
    assert summary.missing_days == 2


def test_half_day_and_leave_and_late(container, seed, april_2025):
    start, end = april_2025
    member = seed.staff("Asha Rao")
    seed.attend(member.staff_id, start, end)
    service = container.attendance_service
    service.record_manual(staff_id=member.staff_id, work_date=date(2025, 4, 2), status="half_day", total_hours="3.5")
    service.record_manual(staff_id=member.staff_id, work_date=date(2025, 4, 3), status="leave")
    service.record_manual(staff_id=member.staff_id, work_date=date(2025, 4, 4), status="late", total_hours="8")

    summary = container.aggregator.summarize(member.staff_id, start=start, end=end)

    assert summary.present_days == Decimal("20.5")
    assert summary.absent_days == Decimal("0.5")
    assert summary.paid_leave_days == Decimal("1")
    assert summary.half_days == 1
    assert summary.late_days == 1
    assert summary.paid_days == Decimal("21.5")


def test_weekend_work_adds_hours_not_days(container, seed, april_2025):
    start, end = april_2025
    member = seed.staff("Asha Rao")
    seed.attend(member.staff_id, start, end)
    container.attendance_repo.upsert_manual(
        staff_id=member.staff_id,
        work_date=date(2025, 4, 5),  # Saturday
        status=AttendanceStatus.PRESENT,
        total_hours=Decimal("4.00"),
        overtime_hours=Decimal("4.00"),
        is_late=False,
    )

    summary = container.aggregator.summarize(member.staff_id, start=start, end=end)

    assert summary.present_days == Decimal("22")
    assert summary.overtime_hours == Decimal("4.00")
    assert summary.total_hours == Decimal("180.00")


def test_summary_is_cached_until_attendance_changes(container, seed, april_2025):
    start, end = april_2025
    member = seed.staff("Asha Rao")
    seed.attend(member.staff_id, start, end)
    repo = container.attendance_repo

    container.aggregator.summarize(member.staff_id, start=start, end=end)
    container.aggregator.summarize(member.staff_id, start=start, end=end)
    assert repo.range_queries == 1

    container.attendance_service.record_manual(staff_id=member.staff_id, work_date=date(2025, 4, 7), status="absent")
    summary = container.aggregator.summarize(member.staff_id, start=start, end=end)

    assert repo.range_queries == 2
    assert summary.absent_days == Decimal("1")


def test_compute_always_reads_the_repository(container, seed, april_2025):
    start, end = april_2025
    member = seed.staff("Asha Rao")
    seed.attend(member.staff_id, start, end)
    repo = container.attendance_repo
    container.aggregator.summarize(member.staff_id, start=start, end=end)

    repo.upsert_manual(
        staff_id=member.staff_id,
        work_date=date(2025, 4, 7),
        status=AttendanceStatus.ABSENT,
        total_hours=Decimal("0"),
        overtime_hours=Decimal("0"),
        is_late=False,
    )

    assert container.aggregator.compute(member.staff_id, start=start, end=end).absent_days == Decimal("1")
    assert repo.range_queries == 2
    # The fresh result replaces the cached copy.
    assert container.aggregator.summarize(member.staff_id, start=start, end=end).absent_days == Decimal("1")
    assert repo.range_queries == 2


def test_cache_keeps_only_the_most_recent_ranges(container, seed):
    member = seed.staff("Asha Rao")
    repo = container.attendance_repo
    aggregator = AttendanceAggregator(repo, cache_size=2)

    aggregator.summarize(member.staff_id, start=date(2025, 4, 1), end=date(2025, 4, 30))
    aggregator.summarize(member.staff_id, start=date(2025, 5, 1), end=date(2025, 5, 31))
    aggregator.summarize(member.staff_id, start=date(2025, 4, 1), end=date(2025, 4, 30))
    aggregator.summarize(member.staff_id, start=date(2025, 6, 1), end=date(2025, 6, 30))
    assert repo.range_queries == 3

    aggregator.summarize(member.staff_id, start=date(2025, 4, 1), end=date(2025, 4, 30))
    assert repo.range_queries == 3
    aggregator.summarize(member.staff_id, start=date(2025, 5, 1), end=date(2025, 5, 31))
    assert repo.range_queries == 4
