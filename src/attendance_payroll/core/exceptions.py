class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when the acting role lacks permission for an action."""


class SequenceError(ValidationError):
    """An attendance action arrived out of order for the day.

    Always correctable by the caller; never retried.
    """


class AlreadyCheckedIn(SequenceError):
    def __init__(self, message: str = "Already checked in today"):
        super().__init__(message)


class AlreadyCheckedOut(SequenceError):
    def __init__(self, message: str = "Already checked out today"):
        super().__init__(message)


class NoCheckInRecord(SequenceError):
    def __init__(self, message: str = "No check-in record found for today"):
        super().__init__(message)


class BreakAlreadyActive(SequenceError):
    def __init__(self, message: str = "Break already started"):
        super().__init__(message)


class NoActiveBreak(SequenceError):
    def __init__(self, message: str = "No active break found"):
        super().__init__(message)


class AlreadyExistsError(DomainError):
    """A uniqueness constraint rejected the write.

    Callers may treat this as a skip rather than a failure.
    """


class DuplicateAttendanceRecord(AlreadyExistsError):
    def __init__(self, employee_id: int, work_date):
        self.employee_id = employee_id
        self.work_date = work_date
        super().__init__(f"Attendance record already exists for employee {employee_id} on {work_date}")


class DuplicatePayrollPeriod(AlreadyExistsError):
    def __init__(self, employee_id: int, period_start, period_end):
        self.employee_id = employee_id
        self.period_start = period_start
        self.period_end = period_end
        super().__init__(
            f"Payroll already exists for employee {employee_id} for period {period_start} - {period_end}"
        )


class NotFoundError(DomainError):
    """A referenced entity does not exist."""


class EmployeeNotFound(NotFoundError):
    def __init__(self, employee_id: int | None = None):
        self.employee_id = employee_id
        if employee_id is None:
            super().__init__("No employees found")
        else:
            super().__init__(f"Employee {employee_id} not found")


class PayslipNotFound(NotFoundError):
    def __init__(self, payslip_id: int):
        self.payslip_id = payslip_id
        super().__init__(f"Payroll record {payslip_id} not found")


class InactiveEmployee(ValidationError):
    def __init__(self, employee_id: int, status: str):
        self.employee_id = employee_id
        self.status = status
        super().__init__(f"Employee {employee_id} is not active (status={status})")


class InvalidStatusTransition(DomainError):
    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid transition from '{from_status}' to '{to_status}'")


class ConcurrentUpdate(DomainError):
    """The record changed between read and conditional write."""
