from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import PayslipStatus
from .model import Payslip


class PayslipRepository(Protocol):
    """Storage contract for payslips.

    Implementations must enforce uniqueness of
    (employee_id, period_start, period_end).
    """

    def get_by_id(self, payslip_id: int) -> Optional[Payslip]:
        raise NotImplementedError

    def get_for_period(self, employee_id: int, period_start: date, period_end: date) -> Optional[Payslip]:
        raise NotImplementedError

    def create(self, payslip: Payslip) -> Payslip:
        """Insert and return the stored payslip; raises DuplicatePayrollPeriod."""
        raise NotImplementedError

    def update_status(
        self,
        payslip_id: int,
        *,
        from_status: PayslipStatus,
        to_status: PayslipStatus,
        payment_date: Optional[date] = None,
    ) -> bool:
        """Move status only if it is still ``from_status``."""
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayslipStatus] = None,
        period_from: Optional[date] = None,
        period_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Payslip]:
        """Filter on ``period_start`` window, newest period first."""
        raise NotImplementedError
