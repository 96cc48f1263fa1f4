from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import EmployeeStatus


@dataclass(frozen=True)
class Employee:
    """Read-only view of an employee owned by the external employee store."""

    employee_id: int
    monthly_salary: Decimal
    status: EmployeeStatus
    hire_date: Optional[date] = None
    full_name: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
