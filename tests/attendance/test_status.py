from datetime import datetime, timezone
from decimal import Decimal

import pytest

from attendance_payroll.attendance.status import classify_status, is_late
from attendance_payroll.core.enums import AttendanceStatus
from attendance_payroll.core.exceptions import ValidationError
from attendance_payroll.core.policy import AttendancePolicy

POLICY = AttendancePolicy(timezone="UTC")


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "check_in,late",
    [(at(8, 10), False), (at(10, 0), False), (at(10, 1), True)],
)
def test_late_after_threshold(check_in, late):
    assert is_late(check_in, POLICY) is late


def test_late_uses_reference_timezone():
    policy = AttendancePolicy(timezone="Asia/Kolkata")
    # 04:00 UTC is 09:30 in Kolkata
    assert is_late(datetime(2026, 3, 2, 4, 0, tzinfo=timezone.utc), policy) is False
    # 05:00 UTC is 10:30 in Kolkata
    assert is_late(datetime(2026, 3, 2, 5, 0, tzinfo=timezone.utc), policy) is True


def test_status_precedence():
    assert classify_status(None, None, POLICY, marked_absent=True) == AttendanceStatus.ABSENT
    assert classify_status(at(10, 30), Decimal("2"), POLICY) == AttendanceStatus.LATE
    assert classify_status(at(9), Decimal("3.99"), POLICY) == AttendanceStatus.HALF_DAY
    assert classify_status(at(9), Decimal("4"), POLICY) == AttendanceStatus.PRESENT


def test_open_day_skips_half_day_rule():
    assert classify_status(at(9), None, POLICY) == AttendanceStatus.PRESENT


def test_no_check_in_requires_absence_mark():
    with pytest.raises(ValidationError):
        classify_status(None, None, POLICY)
