from decimal import Decimal

import pytest

from attendance_payroll.core.exceptions import ValidationError
from attendance_payroll.payroll.tax import ProgressiveTaxSchedule, tax_bracket


@pytest.mark.parametrize(
    "gross,tax",
    [
        ("0", "0.00"),
        ("50000", "0.00"),
        ("60000", "1000.00"),
        ("100000", "5000.00"),
        ("150000", "15000.00"),
        ("200000", "25000.00"),
        ("250000", "40000.00"),
    ],
)
def test_default_brackets_are_marginal(gross, tax):
    assert tax_bracket(Decimal(gross)) == Decimal(tax)


def test_negative_income_pays_no_tax():
    assert tax_bracket(Decimal("-10")) == Decimal("0.00")


def test_custom_schedule():
    schedule = ProgressiveTaxSchedule([(Decimal("1000"), Decimal("0.5")), (None, Decimal("0"))])
    assert schedule(Decimal("3000")) == Decimal("500.00")


def test_schedule_must_end_unbounded():
    with pytest.raises(ValidationError):
        ProgressiveTaxSchedule([(Decimal("1000"), Decimal("0.1"))])


def test_schedule_bounds_must_increase():
    with pytest.raises(ValidationError):
        ProgressiveTaxSchedule([(Decimal("1000"), Decimal("0.1")), (Decimal("500"), Decimal("0.2")), (None, Decimal("0.3"))])
