from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus, PunchMethod
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    address: Optional[str] = None

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude, "address": self.address}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["Location"]:
        if not data:
            return None
        return cls(latitude=float(data["latitude"]), longitude=float(data["longitude"]), address=data.get("address"))


@dataclass(frozen=True)
class Punch:
    """A check-in or check-out event."""

    time: datetime
    method: PunchMethod = PunchMethod.MANUAL
    location: Optional[Location] = None


@dataclass(frozen=True)
class BreakPeriod:
    start: datetime
    end: Optional[datetime] = None
    duration_minutes: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.end is None


@dataclass(frozen=True)
class AttendanceRecord:
    """One employee's attendance for one calendar day.

    Instances are immutable; the ledger produces a new value for every
    transition and persists it as one conditional update keyed on ``version``.
    """

    attendance_id: Optional[int]
    employee_id: int
    work_date: date
    check_in: Optional[Punch] = None
    check_out: Optional[Punch] = None
    breaks: tuple[BreakPeriod, ...] = ()
    total_hours: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")
    status: AttendanceStatus = AttendanceStatus.PRESENT
    notes: Optional[str] = None
    version: int = 0

    def __post_init__(self):
        if self.check_out is not None:
            if self.check_in is None:
                raise ValidationError("check-out recorded without check-in")
            if self.check_out.time <= self.check_in.time:
                raise ValidationError("check-out must be after check-in")
        if sum(1 for b in self.breaks if b.is_open) > 1:
            raise ValidationError("at most one break may be open")
        for b in self.breaks:
            if b.end is not None and b.end < b.start:
                raise ValidationError("break ends before it starts")
        if self.total_hours < 0 or self.overtime_hours < 0:
            raise ValidationError("worked hours cannot be negative")

    @property
    def check_in_time(self) -> Optional[datetime]:
        return self.check_in.time if self.check_in else None

    @property
    def check_out_time(self) -> Optional[datetime]:
        return self.check_out.time if self.check_out else None

    @property
    def is_checked_in(self) -> bool:
        return self.check_in is not None

    @property
    def is_checked_out(self) -> bool:
        return self.check_out is not None

    @property
    def marked_absent(self) -> bool:
        return self.status == AttendanceStatus.ABSENT and self.check_in is None

    @property
    def open_break(self) -> Optional[BreakPeriod]:
        for b in self.breaks:
            if b.is_open:
                return b
        return None

    def evolve(self, **changes) -> "AttendanceRecord":
        return replace(self, **changes)


@dataclass(frozen=True)
class AttendanceStats:
    """Aggregate over a date range for one employee."""

    total_days: int
    present_days: int
    late_days: int
    half_days: int
    absent_days: int
    total_hours: Decimal
    overtime_hours: Decimal
    average_hours: Decimal
    attendance_percentage: Decimal
