from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

from attendance_payroll.attendance.model import AttendanceRecord
from attendance_payroll.core.enums import EmployeeStatus, PayslipStatus
from attendance_payroll.core.exceptions import DuplicateAttendanceRecord, DuplicatePayrollPeriod
from attendance_payroll.employees.model import Employee
from attendance_payroll.payroll.model import Payslip


class FixedClock:
    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


def employee(employee_id: int, salary: str = "90000", status: EmployeeStatus = EmployeeStatus.ACTIVE) -> Employee:
    return Employee(employee_id=employee_id, monthly_salary=Decimal(salary), status=status)


@dataclass
class InMemoryEmployees:
    by_id: dict[int, Employee] = field(default_factory=dict)

    def add(self, *employees: Employee) -> None:
        for e in employees:
            self.by_id[e.employee_id] = e

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)

    def list_active(self):
        return [e for e in sorted(self.by_id.values(), key=lambda e: e.employee_id) if e.is_active]


class InMemoryAttendance:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_key: dict[tuple[int, date], AttendanceRecord] = {}
        self._id = 0

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._by_key.get((employee_id, work_date))

    def list_for_employee(self, employee_id: int, *, start_date: date, end_date: date):
        items = [
            r for (eid, d), r in self._by_key.items() if eid == employee_id and start_date <= d <= end_date
        ]
        return sorted(items, key=lambda r: r.work_date)

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            key = (record.employee_id, record.work_date)
            if key in self._by_key:
                raise DuplicateAttendanceRecord(*key)
            self._id += 1
            stored = record.evolve(attendance_id=self._id, version=0)
            self._by_key[key] = stored
            return stored

    def update(self, record: AttendanceRecord, *, expected_version: int) -> bool:
        with self._lock:
            key = (record.employee_id, record.work_date)
            current = self._by_key.get(key)
            if current is None or current.attendance_id != record.attendance_id:
                return False
            if current.version != expected_version:
                return False
            self._by_key[key] = record.evolve(version=expected_version + 1)
            return True


class RacingAttendance(InMemoryAttendance):
    """Runs ``before_write`` once, just before the next create/update lands.

    Lets a test slip a competing write between the ledger's read and its
    conditional write.
    """

    def __init__(self, before_write: Optional[Callable[[], None]] = None):
        super().__init__()
        self.before_write = before_write

    def _race(self) -> None:
        hook, self.before_write = self.before_write, None
        if hook:
            hook()

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        self._race()
        return super().create(record)

    def update(self, record: AttendanceRecord, *, expected_version: int) -> bool:
        self._race()
        return super().update(record, expected_version=expected_version)


class InMemoryPayslips:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, Payslip] = {}
        self._id = 0
        self.before_create: Optional[Callable[[], None]] = None

    def get_by_id(self, payslip_id: int) -> Optional[Payslip]:
        return self._by_id.get(payslip_id)

    def get_for_period(self, employee_id: int, period_start: date, period_end: date) -> Optional[Payslip]:
        for p in self._by_id.values():
            if (p.employee_id, p.period_start, p.period_end) == (employee_id, period_start, period_end):
                return p
        return None

    def create(self, payslip: Payslip) -> Payslip:
        hook, self.before_create = self.before_create, None
        if hook:
            hook()
        with self._lock:
            if self.get_for_period(payslip.employee_id, payslip.period_start, payslip.period_end):
                raise DuplicatePayrollPeriod(payslip.employee_id, payslip.period_start, payslip.period_end)
            self._id += 1
            stored = payslip.evolve(payslip_id=self._id)
            self._by_id[self._id] = stored
            return stored

    def update_status(
        self,
        payslip_id: int,
        *,
        from_status: PayslipStatus,
        to_status: PayslipStatus,
        payment_date: Optional[date] = None,
    ) -> bool:
        with self._lock:
            current = self._by_id.get(payslip_id)
            if current is None or current.status != from_status:
                return False
            self._by_id[payslip_id] = current.evolve(
                status=to_status, payment_date=payment_date or current.payment_date
            )
            return True

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayslipStatus] = None,
        period_from: Optional[date] = None,
        period_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ):
        items = [
            p
            for p in self._by_id.values()
            if (employee_id is None or p.employee_id == employee_id)
            and (status is None or p.status == status)
            and (period_from is None or p.period_start >= period_from)
            and (period_to is None or p.period_start <= period_to)
        ]
        items.sort(key=lambda p: (-p.period_start.toordinal(), p.employee_id))
        return items[offset:offset + limit]
