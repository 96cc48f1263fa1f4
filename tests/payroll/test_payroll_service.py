import logging
from datetime import date
from decimal import Decimal

import pytest

from attendance_payroll.attendance.model import AttendanceRecord
from attendance_payroll.core.enums import BatchOutcome, EmployeeStatus, PayslipStatus, Role
from attendance_payroll.core.exceptions import (
    AuthorizationError,
    DuplicatePayrollPeriod,
    EmployeeNotFound,
    InactiveEmployee,
    InvalidStatusTransition,
    PayslipNotFound,
    ValidationError,
)
from attendance_payroll.core.policy import PayrollPolicy
from attendance_payroll.payroll.calculator.standard_calculator import StandardPayrollCalculator
from attendance_payroll.payroll.service import PayrollService

from tests.fakes import InMemoryEmployees, employee

START = date(2026, 3, 1)
END = date(2026, 3, 30)


def test_calculate_persists_payslip(payroll, attendance_repo, clock):
    attendance_repo.create(
        AttendanceRecord(
            attendance_id=None,
            employee_id=2,
            work_date=date(2026, 3, 5),
            total_hours=Decimal("10"),
            overtime_hours=Decimal("2"),
        )
    )
    payslip = payroll.calculate(2, START, END, processed_by=7)

    assert payslip.payslip_id is not None
    assert payslip.overtime.amount == Decimal("1200.00")
    assert payslip.processed_by == 7
    assert payslip.processed_at == clock.now()
    assert payroll.get_payslip(payslip.payslip_id) == payslip


def test_duplicate_period_is_rejected(payroll):
    payroll.calculate(1, START, END)
    with pytest.raises(DuplicatePayrollPeriod):
        payroll.calculate(1, START, END)
    # A different period for the same employee is fine.
    payroll.calculate(1, date(2026, 4, 1), date(2026, 4, 30))


def test_duplicate_detected_at_write_time(payroll, payslips_repo):
    payslips_repo.before_create = lambda: payroll.calculate(1, START, END)
    with pytest.raises(DuplicatePayrollPeriod):
        payroll.calculate(1, START, END)
    assert len(payslips_repo.list(employee_id=1)) == 1


def test_calculate_rejects_bad_input(payroll, employees):
    with pytest.raises(ValidationError):
        payroll.calculate(1, END, START)
    with pytest.raises(EmployeeNotFound):
        payroll.calculate(99, START, END)
    employees.add(employee(3, status=EmployeeStatus.TERMINATED))
    with pytest.raises(InactiveEmployee):
        payroll.calculate(3, START, END)


def test_negative_net_is_kept_and_logged(payslips_repo, attendance_repo, employees, clock, caplog):
    service = PayrollService(
        payslips_repo,
        attendance_repo,
        employees,
        clock=clock,
        calculator=StandardPayrollCalculator(PayrollPolicy(other_deduction=Decimal("200000"))),
    )
    with caplog.at_level(logging.WARNING):
        payslip = service.calculate(1, START, END)
    assert payslip.net_salary < 0
    assert "negative net salary" in caplog.text


def test_batch_over_active_employees(payroll, employees):
    employees.add(employee(3, status=EmployeeStatus.INACTIVE))
    payroll.calculate(1, START, END)

    batch = payroll.calculate_batch(START, END, actor_role=Role.ADMIN, processed_by=10)

    outcomes = {r.employee_id: r for r in batch.results}
    assert set(outcomes) == {1, 2}
    assert outcomes[1].outcome == BatchOutcome.SKIPPED
    assert outcomes[1].message == "Payroll already exists for this period"
    assert outcomes[2].outcome == BatchOutcome.SUCCESS
    assert outcomes[2].net_salary is not None
    assert (batch.succeeded, batch.skipped, batch.failed) == (1, 1, 0)


def test_batch_isolates_failures(payroll, employees):
    employees.add(employee(3, status=EmployeeStatus.INACTIVE))

    batch = payroll.calculate_batch(START, END, actor_role="manager", employee_ids=[2, 3, 99, 2])

    assert [r.employee_id for r in batch.results] == [2, 3, 99]
    assert [r.outcome for r in batch.results] == [BatchOutcome.SUCCESS, BatchOutcome.ERROR, BatchOutcome.ERROR]
    assert "not active" in batch.results[1].message
    assert "not found" in batch.results[2].message


def test_batch_requires_privileged_role(payroll):
    with pytest.raises(AuthorizationError):
        payroll.calculate_batch(START, END, actor_role=Role.EMPLOYEE)
    with pytest.raises(AuthorizationError):
        payroll.calculate_batch(START, END, actor_role="intern")


def test_batch_without_employees(payslips_repo, attendance_repo, clock):
    service = PayrollService(payslips_repo, attendance_repo, InMemoryEmployees(), clock=clock)
    with pytest.raises(EmployeeNotFound):
        service.calculate_batch(START, END, actor_role=Role.ADMIN)


def test_status_moves_forward_only(payroll, clock):
    payslip = payroll.calculate(1, START, END)

    processed = payroll.update_status(payslip.payslip_id, "processed")
    assert processed.status == PayslipStatus.PROCESSED
    assert processed.payment_date is None

    with pytest.raises(InvalidStatusTransition):
        payroll.update_status(payslip.payslip_id, PayslipStatus.DRAFT)

    paid = payroll.update_status(payslip.payslip_id, "paid")
    assert paid.payment_date == clock.now().date()
    assert payroll.get_payslip(payslip.payslip_id).status == PayslipStatus.PAID

    with pytest.raises(InvalidStatusTransition):
        payroll.update_status(payslip.payslip_id, "paid")


def test_draft_can_be_paid_directly(payroll):
    payslip = payroll.calculate(1, START, END)
    paid = payroll.update_status(payslip.payslip_id, "paid", payment_date=date(2026, 4, 5))
    assert paid.payment_date == date(2026, 4, 5)


def test_update_status_errors(payroll):
    with pytest.raises(PayslipNotFound):
        payroll.update_status(404, "processed")
    payslip = payroll.calculate(1, START, END)
    with pytest.raises(ValidationError):
        payroll.update_status(payslip.payslip_id, "cancelled")


def test_list_payslips(payroll):
    payroll.calculate(1, date(2026, 2, 1), date(2026, 2, 28))
    payroll.calculate(1, START, END)
    payroll.calculate(2, START, END)

    mine = payroll.list_payslips(employee_id=1)
    assert [p.period_start for p in mine] == [START, date(2026, 2, 1)]

    march = payroll.list_payslips(period_from=START, period_to=END)
    assert {p.employee_id for p in march} == {1, 2}

    assert len(payroll.list_payslips(limit=1, offset=1)) == 1
    assert payroll.list_payslips(status="paid") == []

    with pytest.raises(ValidationError):
        payroll.list_payslips(limit=0)
    with pytest.raises(ValidationError):
        payroll.list_payslips(status="unknown")


def test_overview(payroll, clock):
    first = payroll.calculate(1, START, END)
    second = payroll.calculate(2, START, END)
    payroll.calculate(1, date(2026, 4, 1), date(2026, 4, 30))
    payroll.update_status(first.payslip_id, "processed")
    payroll.update_status(second.payslip_id, "paid")

    march = payroll.overview(2026, 3)
    assert march.total_payslips == 2
    assert march.total_gross == first.gross_salary + second.gross_salary
    assert march.total_net == first.net_salary + second.net_salary
    assert march.total_deductions == first.deductions.total + second.deductions.total
    assert march.processed_count == 1
    assert march.paid_count == 1

    assert payroll.overview(2026).total_payslips == 3
    assert payroll.overview(2025).total_payslips == 0

    with pytest.raises(ValidationError):
        payroll.overview(2026, 13)


def test_batch_isolates_storage_failures(payroll, payslips_repo, caplog):
    real_create = payslips_repo.create

    def create(payslip):
        if payslip.employee_id == 1:
            raise RuntimeError("Out of range value for column 'gross_salary'")
        return real_create(payslip)

    payslips_repo.create = create
    with caplog.at_level(logging.ERROR):
        batch = payroll.calculate_batch(START, END, actor_role="admin")

    assert [r.outcome for r in batch.results] == [BatchOutcome.ERROR, BatchOutcome.SUCCESS]
    assert "Out of range value" in batch.results[0].message
    assert payslips_repo.get_for_period(2, START, END) is not None
    assert "unexpected failure employee_id=1" in caplog.text
