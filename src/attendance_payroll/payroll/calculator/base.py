from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional, Sequence

from ...attendance.model import AttendanceRecord
from ...employees.model import Employee
from ..model import Payslip


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll).

    Implementations are pure: they never read or write storage.
    """

    @abstractmethod
    def compute(
        self,
        employee: Employee,
        records: Sequence[AttendanceRecord],
        *,
        period_start: date,
        period_end: date,
        processed_by: Optional[int] = None,
        processed_at: Optional[datetime] = None,
    ) -> Payslip:
        raise NotImplementedError
