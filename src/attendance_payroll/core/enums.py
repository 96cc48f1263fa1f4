from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Acting role supplied by the external auth layer."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


class PunchMethod(str, Enum):
    """How a check-in/check-out was captured."""

    MANUAL = "manual"
    BIOMETRIC = "biometric"
    MOBILE = "mobile"


class AttendanceStatus(str, Enum):
    """Daily classification stored on the attendance record."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    HALF_DAY = "half-day"


class PayslipStatus(str, Enum):
    DRAFT = "draft"
    PROCESSED = "processed"
    PAID = "paid"


class BatchOutcome(str, Enum):
    """Per-employee outcome of a batch payroll run."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"
