from datetime import datetime, time
from decimal import Decimal

from src.hr_payroll.hr_payroll.attendance.factory import AttendanceStrategyFactory
from src.hr_payroll.hr_payroll.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.hr_payroll.hr_payroll.attendance.strategies.late_strategy import LateStrategy
from src.hr_payroll.hr_payroll.attendance.strategies.normal_strategy import NormalStrategy
from src.hr_payroll.hr_payroll.common.policy import PayrollPolicy


def test_factory_login_on_time_within_grace():
    policy = PayrollPolicy(office_start=time(9, 0), late_grace_minutes=5)
    now = datetime(2025, 4, 1, 9, 4, 59)

    strategy = AttendanceStrategyFactory().for_login(now=now, policy=policy)

    assert isinstance(strategy, NormalStrategy)


def test_factory_login_late_after_grace():
    policy = PayrollPolicy(office_start=time(9, 0), late_grace_minutes=5)
    now = datetime(2025, 4, 1, 9, 6, 0)

    strategy = AttendanceStrategyFactory().for_login(now=now, policy=policy)

    assert isinstance(strategy, LateStrategy)


def test_factory_logout_below_half_day_threshold():
    factory = AttendanceStrategyFactory()
    policy = PayrollPolicy()

    assert isinstance(factory.for_logout(hours=Decimal("3.99"), policy=policy), HalfDayStrategy)
    assert isinstance(factory.for_logout(hours=Decimal("4.00"), policy=policy), NormalStrategy)
