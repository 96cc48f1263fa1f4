from datetime import date
from decimal import Decimal

from attendance_payroll.attendance.model import AttendanceRecord
from attendance_payroll.core.enums import PayslipStatus
from attendance_payroll.core.policy import PayrollPolicy
from attendance_payroll.payroll.calculator.standard_calculator import StandardPayrollCalculator

from tests.fakes import employee

MARCH_START = date(2026, 3, 1)
MARCH_30 = date(2026, 3, 30)


def day(d: int, overtime: str = "0") -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=d,
        employee_id=1,
        work_date=date(2026, 3, d),
        total_hours=Decimal("8") + Decimal(overtime),
        overtime_hours=Decimal(overtime),
    )


def test_thirty_day_period_without_overtime():
    payslip = StandardPayrollCalculator().compute(
        employee(1, salary="90000"), [], period_start=MARCH_START, period_end=MARCH_30
    )

    assert payslip.basic_salary == Decimal("90000.00")
    assert payslip.overtime.amount == Decimal("0.00")
    assert payslip.allowances.total == Decimal("10000.00")
    assert payslip.gross_salary == Decimal("100000.00")
    assert payslip.deductions.tax == Decimal("5000.00")
    assert payslip.deductions.insurance == Decimal("2000.00")
    assert payslip.deductions.provident_fund == Decimal("8000.00")
    assert payslip.net_salary == Decimal("85000.00")
    assert payslip.status == PayslipStatus.DRAFT


def test_basic_salary_is_prorated_on_a_thirty_day_month():
    calc = StandardPayrollCalculator()
    assert calc.basic_salary(Decimal("90000"), 15) == Decimal("45000.00")
    assert calc.basic_salary(Decimal("90000"), 31) == Decimal("93000.00")
    assert calc.basic_salary(Decimal("100000"), 1) == Decimal("3333.33")


def test_overtime_premium():
    calc = StandardPayrollCalculator()
    pay = calc.overtime_pay(Decimal("96000"), Decimal("2.5"))
    assert pay.rate == Decimal("600.0000")
    assert pay.hours == Decimal("2.50")
    assert pay.amount == Decimal("1500.00")


def test_overtime_is_summed_within_the_period_only():
    records = [day(2, "1.25"), day(3, "0.75"), day(3, "0")]
    outside = AttendanceRecord(
        attendance_id=99,
        employee_id=1,
        work_date=date(2026, 4, 1),
        overtime_hours=Decimal("5"),
    )
    payslip = StandardPayrollCalculator().compute(
        employee(1, salary="96000"),
        records + [outside],
        period_start=MARCH_START,
        period_end=MARCH_30,
    )
    assert payslip.overtime.hours == Decimal("2.00")
    assert payslip.overtime.amount == Decimal("1200.00")
    assert payslip.gross_salary == payslip.basic_salary + Decimal("1200.00") + Decimal("10000.00")


def test_components_always_add_up():
    payslip = StandardPayrollCalculator().compute(
        employee(1, salary="123456.78"), [day(4, "3.33")], period_start=MARCH_START, period_end=date(2026, 3, 17)
    )
    assert payslip.gross_salary == payslip.basic_salary + payslip.overtime.amount + payslip.allowances.total
    assert payslip.net_salary == payslip.gross_salary - payslip.deductions.total
    for value in (payslip.basic_salary, payslip.overtime.amount, payslip.deductions.tax):
        assert value == value.quantize(Decimal("0.01"))


def test_policy_drives_allowances_and_initial_status():
    policy = PayrollPolicy(
        allowances={"transport": Decimal("100"), "meal": Decimal("0"), "medical": Decimal("0"), "other": Decimal("0")},
        other_deduction=Decimal("50"),
        initial_status=PayslipStatus.PROCESSED,
    )
    payslip = StandardPayrollCalculator(policy).compute(
        employee(1, salary="30000"), [], period_start=MARCH_START, period_end=MARCH_30
    )
    assert payslip.allowances.total == Decimal("100.00")
    assert payslip.deductions.other == Decimal("50.00")
    assert payslip.status == PayslipStatus.PROCESSED


def test_overtime_amount_uses_unrounded_rate():
    pay = StandardPayrollCalculator().overtime_pay(Decimal("10000.01"), Decimal("200"))
    # exact rate 62.5000625 per hour
    assert pay.rate == Decimal("62.5001")
    assert pay.amount == Decimal("12500.01")
