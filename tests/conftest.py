from datetime import datetime, timezone

import pytest

from attendance_payroll.attendance.service import AttendanceService
from attendance_payroll.core.policy import AttendancePolicy, PayrollPolicy
from attendance_payroll.payroll.calculator.standard_calculator import StandardPayrollCalculator
from attendance_payroll.payroll.service import PayrollService

from .fakes import FixedClock, InMemoryAttendance, InMemoryEmployees, InMemoryPayslips, employee


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 2, 8, 10, tzinfo=timezone.utc))


@pytest.fixture
def employees():
    repo = InMemoryEmployees()
    repo.add(employee(1), employee(2, salary="96000"))
    return repo


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def payslips_repo():
    return InMemoryPayslips()


@pytest.fixture
def ledger(attendance_repo, employees, clock):
    return AttendanceService(attendance_repo, employees, clock=clock, policy=AttendancePolicy(timezone="UTC"))


@pytest.fixture
def payroll(payslips_repo, attendance_repo, employees, clock):
    return PayrollService(
        payslips_repo,
        attendance_repo,
        employees,
        clock=clock,
        calculator=StandardPayrollCalculator(PayrollPolicy()),
    )
