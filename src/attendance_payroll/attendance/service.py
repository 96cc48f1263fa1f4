from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import Clock, ensure_aware, load_zone
from ..common.validators import require_date_range
from ..core.constants import HOURS_QUANT, MONEY_QUANT
from ..core.enums import AttendanceStatus, PunchMethod
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    ConcurrentUpdate,
    DuplicateAttendanceRecord,
    EmployeeNotFound,
    NoCheckInRecord,
    ValidationError,
)
from ..core.policy import AttendancePolicy
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import AttendanceRecord, AttendanceStats, Location, Punch
from .repository import AttendanceRepository
from .status import classify_status
from .timekeeping import close_break, close_open_breaks, compute_worked_time, open_break

logger = logging.getLogger(__name__)

Transition = Callable[[Optional[AttendanceRecord]], AttendanceRecord]


def _as_method(value: PunchMethod | str) -> PunchMethod:
    try:
        return PunchMethod(value)
    except ValueError:
        raise ValidationError(f"Invalid check-in method {value!r}") from None


class AttendanceService:
    """The time-accounting ledger.

    Every mutation reads today's record, derives the next value through a
    pure transition and writes it back as one conditional update. Losing a
    write race is reported as the sequence error that applies to the fresh
    record, never retried.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        clock: Clock,
        policy: Optional[AttendancePolicy] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._clock = clock
        self._policy = policy or AttendancePolicy()
        self._tz = load_zone(self._policy.timezone)

    @property
    def policy(self) -> AttendancePolicy:
        return self._policy

    def _now(self) -> datetime:
        return ensure_aware(self._clock.now(), self._tz).astimezone(self._tz)

    def today(self) -> date:
        return self._now().date()

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFound(employee_id)
        return employee

    def _write(self, current: Optional[AttendanceRecord], updated: AttendanceRecord) -> Optional[AttendanceRecord]:
        if current is None:
            try:
                return self._attendance.create(updated)
            except DuplicateAttendanceRecord:
                return None
        if self._attendance.update(updated, expected_version=current.version):
            return updated.evolve(version=current.version + 1)
        return None

    def _commit(self, employee_id: int, work_date: date, transition: Transition) -> AttendanceRecord:
        current = self._attendance.get_for_employee_and_date(employee_id, work_date)
        saved = self._write(current, transition(current))
        if saved is not None:
            return saved

        # Someone else wrote this day first: report what applies now.
        latest = self._attendance.get_for_employee_and_date(employee_id, work_date)
        transition(latest)
        raise ConcurrentUpdate(f"Attendance for employee {employee_id} on {work_date} changed concurrently")

    # -- transitions -------------------------------------------------------

    def _checked_in(self, record: Optional[AttendanceRecord]) -> AttendanceRecord:
        if record is None or not record.is_checked_in:
            raise NoCheckInRecord()
        return record

    def check_in(
        self,
        employee_id: int,
        *,
        method: PunchMethod | str = PunchMethod.MANUAL,
        location: Optional[Location] = None,
    ) -> AttendanceRecord:
        self._require_employee(employee_id)
        now = self._now()
        punch = Punch(time=now, method=_as_method(method), location=location)

        def transition(record: Optional[AttendanceRecord]) -> AttendanceRecord:
            if record is not None and record.is_checked_in:
                raise AlreadyCheckedIn()
            status = classify_status(punch.time, None, self._policy)
            if record is None:
                return AttendanceRecord(
                    attendance_id=None,
                    employee_id=employee_id,
                    work_date=now.date(),
                    check_in=punch,
                    status=status,
                )
            # An absence mark is overridden by a real check-in.
            return record.evolve(check_in=punch, status=status)

        saved = self._commit(employee_id, now.date(), transition)
        logger.info("[attendance] check-in employee_id=%s date=%s status=%s", employee_id, saved.work_date, saved.status.value)
        return saved

    def check_out(
        self,
        employee_id: int,
        *,
        method: PunchMethod | str = PunchMethod.MANUAL,
        location: Optional[Location] = None,
    ) -> AttendanceRecord:
        self._require_employee(employee_id)
        now = self._now()
        punch = Punch(time=now, method=_as_method(method), location=location)

        def transition(record: Optional[AttendanceRecord]) -> AttendanceRecord:
            record = self._checked_in(record)
            if record.is_checked_out:
                raise AlreadyCheckedOut()
            if punch.time <= record.check_in_time:
                raise ValidationError("check-out must be after check-in")

            breaks = close_open_breaks(record.breaks, punch.time)
            worked = compute_worked_time(
                record.check_in_time,
                punch.time,
                breaks,
                standard_day_hours=self._policy.standard_day_hours,
            )
            return record.evolve(
                check_out=punch,
                breaks=breaks,
                total_hours=worked.total_hours,
                overtime_hours=worked.overtime_hours,
                status=classify_status(record.check_in_time, worked.total_hours, self._policy),
            )

        before = self._attendance.get_for_employee_and_date(employee_id, now.date())
        saved = self._commit(employee_id, now.date(), transition)
        if before is not None and before.open_break is not None:
            logger.warning(
                "[attendance] open break closed at check-out employee_id=%s date=%s", employee_id, saved.work_date
            )
        logger.info(
            "[attendance] check-out employee_id=%s date=%s total_hours=%s overtime_hours=%s status=%s",
            employee_id,
            saved.work_date,
            saved.total_hours,
            saved.overtime_hours,
            saved.status.value,
        )
        return saved

    def start_break(self, employee_id: int) -> AttendanceRecord:
        self._require_employee(employee_id)
        now = self._now()

        def transition(record: Optional[AttendanceRecord]) -> AttendanceRecord:
            record = self._checked_in(record)
            if record.is_checked_out:
                raise AlreadyCheckedOut()
            return record.evolve(breaks=open_break(record.breaks, now))

        saved = self._commit(employee_id, now.date(), transition)
        logger.info("[attendance] break started employee_id=%s date=%s", employee_id, saved.work_date)
        return saved

    def end_break(self, employee_id: int) -> AttendanceRecord:
        self._require_employee(employee_id)
        now = self._now()

        def transition(record: Optional[AttendanceRecord]) -> AttendanceRecord:
            record = self._checked_in(record)
            return record.evolve(breaks=close_break(record.breaks, now))

        saved = self._commit(employee_id, now.date(), transition)
        logger.info("[attendance] break ended employee_id=%s date=%s", employee_id, saved.work_date)
        return saved

    def mark_absent(self, employee_id: int, work_date: date, *, notes: Optional[str] = None) -> AttendanceRecord:
        """Record an explicit absence for a day that has no check-in."""
        self._require_employee(employee_id)
        if work_date > self.today():
            raise ValidationError("Cannot mark a future day as absent")

        def transition(record: Optional[AttendanceRecord]) -> AttendanceRecord:
            if record is not None:
                if record.is_checked_in:
                    raise AlreadyCheckedIn()
                raise DuplicateAttendanceRecord(employee_id, work_date)
            return AttendanceRecord(
                attendance_id=None,
                employee_id=employee_id,
                work_date=work_date,
                status=classify_status(None, None, self._policy, marked_absent=True),
                notes=notes,
            )

        saved = self._commit(employee_id, work_date, transition)
        logger.info("[attendance] marked absent employee_id=%s date=%s", employee_id, work_date)
        return saved

    # -- reads -------------------------------------------------------------

    def get_day(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        self._require_employee(employee_id)
        return self._attendance.get_for_employee_and_date(employee_id, work_date)

    def get_today(self, employee_id: int) -> Optional[AttendanceRecord]:
        return self.get_day(employee_id, self.today())

    def list_range(self, employee_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        require_date_range(start, end)
        self._require_employee(employee_id)
        return self._attendance.list_for_employee(employee_id, start_date=start, end_date=end)

    def stats(self, employee_id: int, start: date, end: date) -> AttendanceStats:
        records = self.list_range(employee_id, start, end)
        return summarize(records)


def summarize(records: Sequence[AttendanceRecord]) -> AttendanceStats:
    counts = {status: 0 for status in AttendanceStatus}
    total_hours = Decimal("0")
    overtime_hours = Decimal("0")
    for r in records:
        counts[r.status] += 1
        total_hours += r.total_hours
        overtime_hours += r.overtime_hours

    total_days = len(records)
    if total_days:
        average = (total_hours / total_days).quantize(HOURS_QUANT, rounding=ROUND_HALF_UP)
        percentage = (Decimal(counts[AttendanceStatus.PRESENT]) * 100 / total_days).quantize(
            MONEY_QUANT, rounding=ROUND_HALF_UP
        )
    else:
        average = Decimal("0.00")
        percentage = Decimal("0.00")

    return AttendanceStats(
        total_days=total_days,
        present_days=counts[AttendanceStatus.PRESENT],
        late_days=counts[AttendanceStatus.LATE],
        half_days=counts[AttendanceStatus.HALF_DAY],
        absent_days=counts[AttendanceStatus.ABSENT],
        total_hours=total_hours,
        overtime_hours=overtime_hours,
        average_hours=average,
        attendance_percentage=percentage,
    )
