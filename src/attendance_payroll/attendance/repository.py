from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Storage contract for the attendance ledger.

    Implementations must enforce uniqueness of (employee_id, work_date) and
    apply ``update`` as a single conditional write on the record version.
    """

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        """Records with ``start_date <= work_date <= end_date``, oldest first."""
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert a new day; raises DuplicateAttendanceRecord if the day exists."""
        raise NotImplementedError

    def update(self, record: AttendanceRecord, *, expected_version: int) -> bool:
        """Replace the stored day if its version still equals ``expected_version``.

        The stored version becomes ``expected_version + 1``. Returns False when
        the row changed underneath the caller.
        """
        raise NotImplementedError
