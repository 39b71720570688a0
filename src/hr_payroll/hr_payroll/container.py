from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.aggregator import AttendanceAggregator
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.policy import PayrollPolicy
from .database.connection import DBConfig, DatabaseConnection
from .payroll.builder import PayrollRecordBuilder
from .payroll.export import PayrollExportService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.repository import PayrollRepository
from .payroll.service import PayrollPeriodService
from .salary.mysql_salary_repository import MySQLSalaryAdvanceRepository, MySQLSalaryStructureRepository
from .salary.repository import SalaryAdvanceRepository, SalaryStructureRepository
from .salary.resolver import SalaryStructureResolver
from .salary.service import SalaryService
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.repository import StaffRepository
from .staff.service import StaffService
from .statutory.mysql_statutory_repository import MySQLStatutoryRateRepository, MySQLTaxSlabRepository
from .statutory.repository import StatutoryRateRepository, TaxSlabRepository
from .statutory.service import StatutoryRateService


@dataclass(frozen=True)
class Container:
    policy: PayrollPolicy

    staff_repo: StaffRepository
    attendance_repo: AttendanceRepository
    structures_repo: SalaryStructureRepository
    advances_repo: SalaryAdvanceRepository
    rates_repo: StatutoryRateRepository
    slabs_repo: TaxSlabRepository
    payroll_repo: PayrollRepository

    aggregator: AttendanceAggregator
    resolver: SalaryStructureResolver
    record_builder: PayrollRecordBuilder

    staff_service: StaffService
    attendance_service: AttendanceService
    salary_service: SalaryService
    statutory_service: StatutoryRateService
    payroll_service: PayrollPeriodService
    export_service: PayrollExportService


def build_services(
    *,
    staff_repo: StaffRepository,
    attendance_repo: AttendanceRepository,
    structures_repo: SalaryStructureRepository,
    advances_repo: SalaryAdvanceRepository,
    rates_repo: StatutoryRateRepository,
    slabs_repo: TaxSlabRepository,
    payroll_repo: PayrollRepository,
    policy: Optional[PayrollPolicy] = None,
) -> Container:
    """Wire services over any repository implementation (MySQL or in-memory)."""
    policy = policy or PayrollPolicy()

    aggregator = AttendanceAggregator(attendance_repo, policy=policy)
    resolver = SalaryStructureResolver(structures_repo)
    record_builder = PayrollRecordBuilder(
        aggregator=aggregator,
        resolver=resolver,
        advances=advances_repo,
        policy=policy,
    )

    staff_service = StaffService(staff_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        staff_repo,
        aggregator,
        strategy_factory=AttendanceStrategyFactory(),
        policy=policy,
    )
    salary_service = SalaryService(structures_repo, advances_repo, staff_repo)
    statutory_service = StatutoryRateService(rates_repo, slabs_repo)
    payroll_service = PayrollPeriodService(payroll_repo, staff_repo, record_builder, statutory_service, advances_repo)
    export_service = PayrollExportService(payroll_service, staff_repo)

    return Container(
        policy=policy,
        staff_repo=staff_repo,
        attendance_repo=attendance_repo,
        structures_repo=structures_repo,
        advances_repo=advances_repo,
        rates_repo=rates_repo,
        slabs_repo=slabs_repo,
        payroll_repo=payroll_repo,
        aggregator=aggregator,
        resolver=resolver,
        record_builder=record_builder,
        staff_service=staff_service,
        attendance_service=attendance_service,
        salary_service=salary_service,
        statutory_service=statutory_service,
        payroll_service=payroll_service,
        export_service=export_service,
    )


def build_container(*, db_config: dict, policy: Optional[PayrollPolicy] = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    return build_services(
        staff_repo=MySQLStaffRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        structures_repo=MySQLSalaryStructureRepository(conn),
        advances_repo=MySQLSalaryAdvanceRepository(conn),
        rates_repo=MySQLStatutoryRateRepository(conn),
        slabs_repo=MySQLTaxSlabRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        policy=policy,
    )
