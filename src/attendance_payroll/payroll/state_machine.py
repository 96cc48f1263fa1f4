"""Payslip status state machine with transition validation."""
from __future__ import annotations

from ..core.enums import PayslipStatus
from ..core.exceptions import InvalidStatusTransition


class PayslipStateMachine:
    """Forward-only payslip lifecycle.

    Allowed transitions:
    - draft → processed
    - draft → paid
    - processed → paid
    """

    VALID_TRANSITIONS: dict[PayslipStatus, frozenset[PayslipStatus]] = {
        PayslipStatus.DRAFT: frozenset({PayslipStatus.PROCESSED, PayslipStatus.PAID}),
        PayslipStatus.PROCESSED: frozenset({PayslipStatus.PAID}),
        PayslipStatus.PAID: frozenset(),  # Terminal state
    }

    @classmethod
    def can_transition(cls, from_status: PayslipStatus, to_status: PayslipStatus) -> bool:
        return to_status in cls.VALID_TRANSITIONS.get(from_status, frozenset())

    @classmethod
    def validate_transition(cls, from_status: PayslipStatus, to_status: PayslipStatus) -> None:
        if not cls.can_transition(from_status, to_status):
            raise InvalidStatusTransition(from_status.value, to_status.value)

