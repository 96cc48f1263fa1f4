from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import at_time_of_day, ensure_aware, load_zone
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..core.policy import AttendancePolicy


def is_late(check_in_time: datetime, policy: AttendancePolicy) -> bool:
    """Late once check-in passes workday start plus the threshold."""
    tz = load_zone(policy.timezone)
    local = ensure_aware(check_in_time, tz).astimezone(tz)
    boundary = at_time_of_day(local.date(), policy.workday_start, tz)
    return local > boundary + timedelta(minutes=policy.late_threshold_minutes)


def classify_status(
    check_in_time: Optional[datetime],
    total_hours: Optional[Decimal],
    policy: AttendancePolicy,
    *,
    marked_absent: bool = False,
) -> AttendanceStatus:
    """Single source of truth for the daily status.

    Precedence: absent, late, half-day, present. ``total_hours`` is ``None``
    while the day is still open, which skips the half-day rule.
    """
    if check_in_time is None:
        if marked_absent:
            return AttendanceStatus.ABSENT
        raise ValidationError("cannot classify a day with no check-in unless it is marked absent")
    if is_late(check_in_time, policy):
        return AttendanceStatus.LATE
    if total_hours is not None and total_hours < policy.half_day_hours:
        return AttendanceStatus.HALF_DAY
    return AttendanceStatus.PRESENT
