from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def parse_clock_time(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) into a time of day."""
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except (TypeError, ValueError):
            continue
    raise ValidationError(f"Invalid time of day {value!r}, expected HH:MM")


def load_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone {name!r}") from None


class Clock(Protocol):
    """Source of "now" for the ledger and calculator.

    Implementations return timezone-aware datetimes in the reference zone.
    """

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    def __init__(self, tz: str | ZoneInfo = "UTC"):
        self._tz = tz if isinstance(tz, ZoneInfo) else load_zone(tz)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


def ensure_aware(moment: datetime, tz: ZoneInfo) -> datetime:
    # Naive values are interpreted as wall-clock time in the reference zone.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment


def at_time_of_day(day: date, when: time, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, when, tzinfo=tz)


def whole_minutes(start: datetime, end: datetime) -> int:
    """Elapsed whole minutes from start to end, truncated toward zero."""
    return int((end - start).total_seconds() / 60)


def to_storage(moment: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime into naive UTC for DATETIME columns."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        raise ValueError("refusing to store a naive datetime")
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: Optional[datetime], tz: ZoneInfo) -> Optional[datetime]:
    """Inverse of :func:`to_storage`."""
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc).astimezone(tz)
