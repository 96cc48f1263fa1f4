from __future__ import annotations

import calendar
import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.enums import PRIVILEGED_ROLES, BatchOutcome, PayslipStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    ConcurrentUpdate,
    DomainError,
    DuplicatePayrollPeriod,
    EmployeeNotFound,
    InactiveEmployee,
    PayslipNotFound,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator, period_worked_hours
from .model import Payslip, PayrollBatchResult, PayrollOutcome, PayrollOverview
from .repository import PayslipRepository
from .state_machine import PayslipStateMachine

logger = logging.getLogger(__name__)


class PayrollService:
    def __init__(
        self,
        payslips: PayslipRepository,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        clock: Clock,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payslips = payslips
        self._attendance = attendance
        self._employees = employees
        self._clock = clock
        self._calculator = calculator or StandardPayrollCalculator()

    def _calculate_for(
        self,
        employee: Employee,
        period_start: date,
        period_end: date,
        *,
        processed_by: Optional[int],
    ) -> Payslip:
        if not employee.is_active:
            raise InactiveEmployee(employee.employee_id, employee.status.value)
        if self._payslips.get_for_period(employee.employee_id, period_start, period_end):
            raise DuplicatePayrollPeriod(employee.employee_id, period_start, period_end)

        records = self._attendance.list_for_employee(
            employee.employee_id, start_date=period_start, end_date=period_end
        )
        payslip = self._calculator.compute(
            employee,
            records,
            period_start=period_start,
            period_end=period_end,
            processed_by=processed_by,
            processed_at=self._clock.now(),
        )
        saved = self._payslips.create(payslip)

        logger.info(
            "[payroll] payslip created employee_id=%s period=%s..%s days=%s worked_hours=%s overtime_hours=%s gross=%s net=%s",
            employee.employee_id,
            period_start,
            period_end,
            saved.period_days,
            period_worked_hours(records),
            saved.overtime.hours,
            saved.gross_salary,
            saved.net_salary,
        )
        if saved.net_salary < 0:
            logger.warning(
                "[payroll] negative net salary employee_id=%s payslip_id=%s net=%s",
                employee.employee_id,
                saved.payslip_id,
                saved.net_salary,
            )
        return saved

    def calculate(
        self,
        employee_id: int,
        period_start: date,
        period_end: date,
        *,
        processed_by: Optional[int] = None,
    ) -> Payslip:
        """Compute and persist the payslip for one employee and period."""
        require_date_range(period_start, period_end, start_name="pay period start", end_name="pay period end")
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFound(employee_id)
        return self._calculate_for(employee, period_start, period_end, processed_by=processed_by)

    def calculate_batch(
        self,
        period_start: date,
        period_end: date,
        *,
        actor_role: Role | str,
        employee_ids: Optional[Sequence[int]] = None,
        processed_by: Optional[int] = None,
    ) -> PayrollBatchResult:
        """Calculate payslips for several employees, isolating per-employee failures.

        Employees are processed one at a time; each payslip is persisted on its
        own, so a re-run after a crash skips the ones already written.
        """
        try:
            role = Role(actor_role)
        except ValueError:
            raise AuthorizationError(f"Unknown role {actor_role!r}") from None
        if role not in PRIVILEGED_ROLES:
            raise AuthorizationError("Only admin or manager may calculate payroll")

        require_date_range(period_start, period_end, start_name="pay period start", end_name="pay period end")
        if employee_ids is None:
            targets: list[int | Employee] = list(self._employees.list_active())
        else:
            targets = list(dict.fromkeys(int(i) for i in employee_ids))
        if not targets:
            raise EmployeeNotFound()

        results: list[PayrollOutcome] = []
        for target in targets:
            employee_id = target.employee_id if isinstance(target, Employee) else target
            try:
                employee = target if isinstance(target, Employee) else self._employees.get_by_id(target)
                if employee is None:
                    raise EmployeeNotFound(employee_id)
                payslip = self._calculate_for(employee, period_start, period_end, processed_by=processed_by)
            except DuplicatePayrollPeriod as e:
                logger.warning("[payroll] skipped employee_id=%s: %s", employee_id, e)
                results.append(
                    PayrollOutcome(
                        employee_id=employee_id,
                        outcome=BatchOutcome.SKIPPED,
                        message="Payroll already exists for this period",
                    )
                )
            except DomainError as e:
                logger.warning("[payroll] failed employee_id=%s: %s", employee_id, e)
                results.append(PayrollOutcome(employee_id=employee_id, outcome=BatchOutcome.ERROR, message=str(e)))
            except Exception as e:
                logger.exception("[payroll] unexpected failure employee_id=%s", employee_id)
                results.append(PayrollOutcome(employee_id=employee_id, outcome=BatchOutcome.ERROR, message=str(e)))
            else:
                results.append(
                    PayrollOutcome(
                        employee_id=employee_id,
                        outcome=BatchOutcome.SUCCESS,
                        payslip_id=payslip.payslip_id,
                        net_salary=payslip.net_salary,
                    )
                )

        batch = PayrollBatchResult(period_start=period_start, period_end=period_end, results=tuple(results))
        logger.info(
            "[payroll] batch %s..%s done: success=%s skipped=%s error=%s",
            period_start,
            period_end,
            batch.succeeded,
            batch.skipped,
            batch.failed,
        )
        return batch

    def update_status(
        self,
        payslip_id: int,
        status: PayslipStatus | str,
        *,
        payment_date: Optional[date] = None,
    ) -> Payslip:
        try:
            target = PayslipStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid payroll status {status!r}") from None

        current = self.get_payslip(payslip_id)
        PayslipStateMachine.validate_transition(current.status, target)

        if target == PayslipStatus.PAID:
            payment_date = payment_date or self._clock.now().date()
        else:
            payment_date = None

        if not self._payslips.update_status(
            payslip_id, from_status=current.status, to_status=target, payment_date=payment_date
        ):
            raise ConcurrentUpdate(f"Payroll record {payslip_id} changed concurrently")

        logger.info(
            "[payroll] status payslip_id=%s %s -> %s", payslip_id, current.status.value, target.value
        )
        return current.evolve(status=target, payment_date=payment_date or current.payment_date)

    def get_payslip(self, payslip_id: int) -> Payslip:
        payslip = self._payslips.get_by_id(payslip_id)
        if not payslip:
            raise PayslipNotFound(payslip_id)
        return payslip

    def list_payslips(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayslipStatus | str] = None,
        period_from: Optional[date] = None,
        period_to: Optional[date] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> Sequence[Payslip]:
        if limit <= 0 or limit > MAX_PAGE_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")
        if offset < 0:
            raise ValidationError("offset must not be negative")
        if period_from and period_to:
            require_date_range(period_from, period_to, start_name="period_from", end_name="period_to")
        try:
            status_filter = PayslipStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Invalid payroll status {status!r}") from None

        return self._payslips.list(
            employee_id=employee_id,
            status=status_filter,
            period_from=period_from,
            period_to=period_to,
            limit=limit,
            offset=offset,
        )

    def _iter_window(self, start: date, end: date) -> Iterable[Payslip]:
        offset = 0
        while True:
            page = self._payslips.list(period_from=start, period_to=end, limit=MAX_PAGE_LIMIT, offset=offset)
            yield from page
            if len(page) < MAX_PAGE_LIMIT:
                return
            offset += MAX_PAGE_LIMIT

    def overview(self, year: int, month: Optional[int] = None) -> PayrollOverview:
        """Totals for payslips whose period starts in the given year (or month)."""
        if month is not None and not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        if month is None:
            start, end = date(year, 1, 1), date(year, 12, 31)
        else:
            start = date(year, month, 1)
            end = date(year, month, calendar.monthrange(year, month)[1])

        total = 0
        gross = net = deductions = overtime = Decimal("0.00")
        processed = paid = 0
        for p in self._iter_window(start, end):
            total += 1
            gross += p.gross_salary
            net += p.net_salary
            deductions += p.deductions.total
            overtime += p.overtime.amount
            if p.status == PayslipStatus.PROCESSED:
                processed += 1
            elif p.status == PayslipStatus.PAID:
                paid += 1

        return PayrollOverview(
            total_payslips=total,
            total_gross=gross,
            total_net=net,
            total_deductions=deductions,
            total_overtime_amount=overtime,
            processed_count=processed,
            paid_count=paid,
        )
