from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ...attendance.model import AttendanceRecord
from ...core.constants import HOURS_QUANT, MONEY_QUANT, RATE_QUANT
from ...core.policy import PayrollPolicy
from ...employees.model import Employee
from ..model import Allowances, Deductions, OvertimePay, Payslip
from ..tax import ProgressiveTaxSchedule
from .base import PayrollCalculator


def _money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule, applied in a fixed order with 2 dp rounding per layer:

    prorated basic → overtime premium → allowances → gross → tax,
    insurance, provident fund → net.

    A month is always ``standard_month_days`` long, both for proration and
    for the hourly rate behind overtime.
    """

    def __init__(self, policy: Optional[PayrollPolicy] = None, *, tax_schedule: Optional[ProgressiveTaxSchedule] = None):
        self._policy = policy or PayrollPolicy()
        self._tax = tax_schedule or ProgressiveTaxSchedule(self._policy.tax_brackets)

    @property
    def tax_schedule(self) -> ProgressiveTaxSchedule:
        return self._tax

    def basic_salary(self, monthly_salary: Decimal, period_days: int) -> Decimal:
        return _money(monthly_salary / self._policy.standard_month_days * period_days)

    def overtime_rate(self, monthly_salary: Decimal) -> Decimal:
        """Unrounded premium hourly rate."""
        return (
            monthly_salary
            * self._policy.overtime_multiplier
            / (self._policy.standard_month_days * self._policy.standard_day_hours)
        )

    def overtime_pay(self, monthly_salary: Decimal, overtime_hours: Decimal) -> OvertimePay:
        # Only the reported rate is rounded; the amount uses the exact rate.
        rate = self.overtime_rate(monthly_salary)
        hours = overtime_hours.quantize(HOURS_QUANT, rounding=ROUND_HALF_UP)
        return OvertimePay(
            hours=hours,
            rate=rate.quantize(RATE_QUANT, rounding=ROUND_HALF_UP),
            amount=_money(hours * rate),
        )

    def allowances(self) -> Allowances:
        a = self._policy.allowances
        return Allowances(
            transport=_money(a.get("transport", Decimal("0"))),
            meal=_money(a.get("meal", Decimal("0"))),
            medical=_money(a.get("medical", Decimal("0"))),
            other=_money(a.get("other", Decimal("0"))),
        )

    def deductions(self, gross: Decimal) -> Deductions:
        return Deductions(
            tax=self._tax.tax_for(gross),
            insurance=_money(gross * self._policy.insurance_rate),
            provident_fund=_money(gross * self._policy.provident_fund_rate),
            other=_money(self._policy.other_deduction),
        )

    def compute(
        self,
        employee: Employee,
        records: Sequence[AttendanceRecord],
        *,
        period_start: date,
        period_end: date,
        processed_by: Optional[int] = None,
        processed_at: Optional[datetime] = None,
    ) -> Payslip:
        period_days = (period_end - period_start).days + 1
        overtime_hours = sum(
            (r.overtime_hours for r in records if period_start <= r.work_date <= period_end),
            Decimal("0"),
        )

        draft = Payslip(
            payslip_id=None,
            employee_id=employee.employee_id,
            period_start=period_start,
            period_end=period_end,
            basic_salary=self.basic_salary(employee.monthly_salary, period_days),
            overtime=self.overtime_pay(employee.monthly_salary, overtime_hours),
            allowances=self.allowances(),
            status=self._policy.initial_status,
            processed_by=processed_by,
            processed_at=processed_at,
        )
        return draft.evolve(deductions=self.deductions(draft.gross_salary))


def period_worked_hours(records: Sequence[AttendanceRecord]) -> Decimal:
    return sum((r.total_hours for r in records), Decimal("0"))
