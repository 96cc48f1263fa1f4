"""Pure time arithmetic for a single attendance day.

Nothing here touches storage or the clock: callers pass the instants in and
get new values back, which keeps the rules deterministic under test.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ..common.datetime_utils import whole_minutes
from ..core.constants import HOURS_QUANT
from ..core.exceptions import BreakAlreadyActive, NoActiveBreak, ValidationError
from .model import BreakPeriod

_SECONDS_PER_HOUR = Decimal(3600)


@dataclass(frozen=True)
class WorkedTime:
    total_hours: Decimal
    overtime_hours: Decimal
    break_seconds: int


def open_break(breaks: Sequence[BreakPeriod], at: datetime) -> tuple[BreakPeriod, ...]:
    if any(b.is_open for b in breaks):
        raise BreakAlreadyActive()
    return tuple(breaks) + (BreakPeriod(start=at),)


def close_break(breaks: Sequence[BreakPeriod], at: datetime) -> tuple[BreakPeriod, ...]:
    """Close the most recent open break at ``at``."""
    for idx in range(len(breaks) - 1, -1, -1):
        b = breaks[idx]
        if not b.is_open:
            continue
        if at < b.start:
            raise ValidationError("break cannot end before it started")
        closed = BreakPeriod(start=b.start, end=at, duration_minutes=whole_minutes(b.start, at))
        return tuple(breaks[:idx]) + (closed,) + tuple(breaks[idx + 1:])
    raise NoActiveBreak()


def close_open_breaks(breaks: Sequence[BreakPeriod], at: datetime) -> tuple[BreakPeriod, ...]:
    """Close any break still open at check-out, ending it at the check-out time."""
    if not any(b.is_open for b in breaks):
        return tuple(breaks)
    return close_break(breaks, max(at, next(b.start for b in breaks if b.is_open)))


def break_seconds_within(breaks: Sequence[BreakPeriod], window_start: datetime, window_end: datetime) -> int:
    """Sum of closed break spans, each clamped to [window_start, window_end]."""
    total = 0
    for b in breaks:
        if b.end is None:
            continue
        start = max(b.start, window_start)
        end = min(b.end, window_end)
        if end > start:
            total += int((end - start).total_seconds())
    return total


def to_hours(seconds: int | float) -> Decimal:
    return (Decimal(str(seconds)) / _SECONDS_PER_HOUR).quantize(HOURS_QUANT, rounding=ROUND_HALF_UP)


def compute_worked_time(
    check_in: datetime,
    check_out: datetime,
    breaks: Sequence[BreakPeriod],
    *,
    standard_day_hours: Decimal,
) -> WorkedTime:
    """Derive total and overtime hours for a closed day.

    ``breaks`` must already be closed (see :func:`close_open_breaks`).
    """
    if check_out <= check_in:
        raise ValidationError("check-out must be after check-in")

    span_seconds = (check_out - check_in).total_seconds()
    paused = break_seconds_within(breaks, check_in, check_out)
    total_hours = max(Decimal("0.00"), to_hours(span_seconds - paused))
    overtime_hours = max(Decimal("0.00"), total_hours - standard_day_hours)
    return WorkedTime(total_hours=total_hours, overtime_hours=overtime_hours, break_seconds=paused)
