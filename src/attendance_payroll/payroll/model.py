from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import BatchOutcome, PayslipStatus
from ..core.exceptions import ValidationError

_ZERO = Decimal("0.00")


@dataclass(frozen=True)
class OvertimePay:
    hours: Decimal = _ZERO
    rate: Decimal = _ZERO
    amount: Decimal = _ZERO


@dataclass(frozen=True)
class Allowances:
    transport: Decimal = _ZERO
    meal: Decimal = _ZERO
    medical: Decimal = _ZERO
    other: Decimal = _ZERO

    @property
    def total(self) -> Decimal:
        return self.transport + self.meal + self.medical + self.other


@dataclass(frozen=True)
class Deductions:
    tax: Decimal = _ZERO
    insurance: Decimal = _ZERO
    provident_fund: Decimal = _ZERO
    other: Decimal = _ZERO

    @property
    def total(self) -> Decimal:
        return self.tax + self.insurance + self.provident_fund + self.other


@dataclass(frozen=True)
class Payslip:
    """Computed pay for one employee and one pay period.

    Gross and net are derived from the fixed components, so they cannot
    drift from what was stored. A negative net is kept as-is.
    """

    payslip_id: Optional[int]
    employee_id: int
    period_start: date
    period_end: date
    basic_salary: Decimal
    overtime: OvertimePay = field(default_factory=OvertimePay)
    allowances: Allowances = field(default_factory=Allowances)
    deductions: Deductions = field(default_factory=Deductions)
    status: PayslipStatus = PayslipStatus.DRAFT
    payment_date: Optional[date] = None
    processed_by: Optional[int] = None
    processed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.period_end < self.period_start:
            raise ValidationError("pay period ends before it starts")

    @property
    def gross_salary(self) -> Decimal:
        return self.basic_salary + self.overtime.amount + self.allowances.total

    @property
    def net_salary(self) -> Decimal:
        return self.gross_salary - self.deductions.total

    @property
    def period_days(self) -> int:
        return (self.period_end - self.period_start).days + 1

    def evolve(self, **changes) -> "Payslip":
        return replace(self, **changes)


@dataclass(frozen=True)
class PayrollOutcome:
    employee_id: int
    outcome: BatchOutcome
    payslip_id: Optional[int] = None
    net_salary: Optional[Decimal] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class PayrollBatchResult:
    period_start: date
    period_end: date
    results: tuple[PayrollOutcome, ...]

    def _count(self, outcome: BatchOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def succeeded(self) -> int:
        return self._count(BatchOutcome.SUCCESS)

    @property
    def skipped(self) -> int:
        return self._count(BatchOutcome.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(BatchOutcome.ERROR)


@dataclass(frozen=True)
class PayrollOverview:
    total_payslips: int
    total_gross: Decimal
    total_net: Decimal
    total_deductions: Decimal
    total_overtime_amount: Decimal
    processed_count: int
    paid_count: int
