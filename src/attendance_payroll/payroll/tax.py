"""Progressive income tax on gross pay.

The default schedule is illustrative, not a jurisdiction's statutory table.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..core.constants import DEFAULT_TAX_BRACKETS, MONEY_QUANT
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class TaxBracket:
    upper: Optional[Decimal]  # None = no upper bound
    rate: Decimal


class ProgressiveTaxSchedule:
    """Marginal-rate schedule: each rate applies only to income inside its band."""

    def __init__(self, brackets: Sequence[tuple[Optional[Decimal], Decimal]] = DEFAULT_TAX_BRACKETS):
        parsed = [TaxBracket(upper=u, rate=r) for u, r in brackets]
        if not parsed:
            raise ValidationError("tax schedule needs at least one bracket")
        if parsed[-1].upper is not None:
            raise ValidationError("last tax bracket must be unbounded")
        previous = Decimal("0")
        for b in parsed[:-1]:
            if b.upper is None or b.upper <= previous:
                raise ValidationError("tax bracket bounds must be strictly increasing")
            previous = b.upper
        self._brackets = tuple(parsed)

    @property
    def brackets(self) -> tuple[TaxBracket, ...]:
        return self._brackets

    def tax_for(self, income: Decimal) -> Decimal:
        if income <= 0:
            return Decimal("0.00")
        tax = Decimal("0")
        lower = Decimal("0")
        for b in self._brackets:
            upper = income if b.upper is None else min(income, b.upper)
            if upper > lower:
                tax += (upper - lower) * b.rate
            if b.upper is None or income <= b.upper:
                break
            lower = b.upper
        return tax.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)

    __call__ = tax_for


DEFAULT_SCHEDULE = ProgressiveTaxSchedule()


def tax_bracket(gross: Decimal) -> Decimal:
    """Tax on ``gross`` under the default schedule."""
    return DEFAULT_SCHEDULE.tax_for(gross)
