from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, SystemClock, load_zone
from .core.policy import attendance_policy_from_settings, payroll_policy_from_settings
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payslip_repository import MySQLPayslipRepository
from .payroll.repository import PayslipRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Clock

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    payslips_repo: PayslipRepository

    attendance_service: AttendanceService
    payroll_service: PayrollService


def wire_services(
    *,
    settings: Any,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    payslips_repo: PayslipRepository,
    clock: Optional[Clock] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    attendance_policy = attendance_policy_from_settings(settings)
    payroll_policy = payroll_policy_from_settings(settings)
    clock = clock or SystemClock(attendance_policy.timezone)

    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        clock=clock,
        policy=attendance_policy,
    )
    payroll_service = PayrollService(
        payslips_repo,
        attendance_repo,
        employees_repo,
        clock=clock,
        calculator=StandardPayrollCalculator(payroll_policy),
    )

    return Container(
        conn=conn,
        clock=clock,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        payslips_repo=payslips_repo,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
    )


def build_container(*, settings: Any, clock: Optional[Clock] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
    tz = load_zone(attendance_policy_from_settings(settings).timezone)

    return wire_services(
        settings=settings,
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn, tz=tz),
        payslips_repo=MySQLPayslipRepository(conn, tz=tz),
        clock=clock,
        conn=conn,
    )
