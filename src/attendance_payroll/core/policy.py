from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_clock_time
from ..common.validators import require_non_negative, to_decimal
from .constants import (
    DEFAULT_ALLOWANCES,
    DEFAULT_HALF_DAY_HOURS,
    DEFAULT_INSURANCE_RATE,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_OVERTIME_MULTIPLIER,
    DEFAULT_PROVIDENT_FUND_RATE,
    DEFAULT_STANDARD_DAY_HOURS,
    DEFAULT_STANDARD_MONTH_DAYS,
    DEFAULT_TAX_BRACKETS,
    DEFAULT_TIMEZONE,
    DEFAULT_WORKDAY_START,
)
from .enums import PayslipStatus
from .exceptions import ValidationError


@dataclass(frozen=True)
class AttendancePolicy:
    """Thresholds used by the ledger to derive hours and status."""

    timezone: str = DEFAULT_TIMEZONE
    workday_start: time = field(default_factory=lambda: parse_clock_time(DEFAULT_WORKDAY_START))
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES
    standard_day_hours: Decimal = DEFAULT_STANDARD_DAY_HOURS
    half_day_hours: Decimal = DEFAULT_HALF_DAY_HOURS

    def __post_init__(self):
        if self.late_threshold_minutes < 0:
            raise ValidationError("late_threshold_minutes must be >= 0")
        if self.standard_day_hours <= 0:
            raise ValidationError("standard_day_hours must be > 0")
        if self.half_day_hours < 0:
            raise ValidationError("half_day_hours must be >= 0")


@dataclass(frozen=True)
class PayrollPolicy:
    """Rates and fixed amounts used by the payroll calculator."""

    standard_month_days: int = DEFAULT_STANDARD_MONTH_DAYS
    standard_day_hours: Decimal = DEFAULT_STANDARD_DAY_HOURS
    overtime_multiplier: Decimal = DEFAULT_OVERTIME_MULTIPLIER
    allowances: Mapping[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_ALLOWANCES))
    insurance_rate: Decimal = DEFAULT_INSURANCE_RATE
    provident_fund_rate: Decimal = DEFAULT_PROVIDENT_FUND_RATE
    other_deduction: Decimal = Decimal("0")
    tax_brackets: tuple = DEFAULT_TAX_BRACKETS
    initial_status: PayslipStatus = PayslipStatus.DRAFT

    def __post_init__(self):
        if self.standard_month_days <= 0:
            raise ValidationError("standard_month_days must be > 0")
        if self.standard_day_hours <= 0:
            raise ValidationError("standard_day_hours must be > 0")
        if self.initial_status not in (PayslipStatus.DRAFT, PayslipStatus.PROCESSED):
            raise ValidationError("initial payslip status must be draft or processed")
        unknown = set(self.allowances) - set(DEFAULT_ALLOWANCES)
        if unknown:
            raise ValidationError(f"Unknown allowance keys: {sorted(unknown)}")


def _setting(settings: Any, name: str, default: Any) -> Any:
    value = getattr(settings, name, None)
    return default if value is None else value


def attendance_policy_from_settings(settings: Any) -> AttendancePolicy:
    return AttendancePolicy(
        timezone=str(_setting(settings, "TIMEZONE", DEFAULT_TIMEZONE)),
        workday_start=parse_clock_time(str(_setting(settings, "WORKDAY_START", DEFAULT_WORKDAY_START))),
        late_threshold_minutes=int(_setting(settings, "LATE_THRESHOLD_MINUTES", DEFAULT_LATE_THRESHOLD_MINUTES)),
        standard_day_hours=to_decimal(_setting(settings, "STANDARD_DAY_HOURS", DEFAULT_STANDARD_DAY_HOURS)),
        half_day_hours=to_decimal(_setting(settings, "HALF_DAY_HOURS", DEFAULT_HALF_DAY_HOURS)),
    )


def _initial_status(value: Any) -> PayslipStatus:
    try:
        return PayslipStatus(str(value))
    except ValueError:
        raise ValidationError(f"Invalid PAYSLIP_INITIAL_STATUS {value!r}") from None


def payroll_policy_from_settings(settings: Any) -> PayrollPolicy:
    raw_allowances: Optional[Mapping[str, Any]] = getattr(settings, "ALLOWANCES", None)
    allowances = dict(DEFAULT_ALLOWANCES)
    for key, value in (raw_allowances or {}).items():
        allowances[key] = require_non_negative(to_decimal(value), f"allowance '{key}'")

    return PayrollPolicy(
        standard_month_days=int(_setting(settings, "STANDARD_MONTH_DAYS", DEFAULT_STANDARD_MONTH_DAYS)),
        standard_day_hours=to_decimal(_setting(settings, "STANDARD_DAY_HOURS", DEFAULT_STANDARD_DAY_HOURS)),
        overtime_multiplier=to_decimal(_setting(settings, "OVERTIME_MULTIPLIER", DEFAULT_OVERTIME_MULTIPLIER)),
        allowances=allowances,
        insurance_rate=to_decimal(_setting(settings, "INSURANCE_RATE", DEFAULT_INSURANCE_RATE)),
        provident_fund_rate=to_decimal(_setting(settings, "PROVIDENT_FUND_RATE", DEFAULT_PROVIDENT_FUND_RATE)),
        other_deduction=to_decimal(_setting(settings, "OTHER_DEDUCTION", Decimal("0"))),
        initial_status=_initial_status(_setting(settings, "PAYSLIP_INITIAL_STATUS", PayslipStatus.DRAFT.value)),
    )
