import pytest

from attendance_payroll.core.enums import PayslipStatus
from attendance_payroll.core.exceptions import InvalidStatusTransition
from attendance_payroll.payroll.state_machine import PayslipStateMachine


@pytest.mark.parametrize(
    "from_status,to_status",
    [
        (PayslipStatus.DRAFT, PayslipStatus.PROCESSED),
        (PayslipStatus.DRAFT, PayslipStatus.PAID),
        (PayslipStatus.PROCESSED, PayslipStatus.PAID),
    ],
)
def test_forward_transitions(from_status, to_status):
    assert PayslipStateMachine.can_transition(from_status, to_status)
    PayslipStateMachine.validate_transition(from_status, to_status)


@pytest.mark.parametrize(
    "from_status,to_status",
    [
        (PayslipStatus.PROCESSED, PayslipStatus.DRAFT),
        (PayslipStatus.PAID, PayslipStatus.PROCESSED),
        (PayslipStatus.PAID, PayslipStatus.PAID),
        (PayslipStatus.DRAFT, PayslipStatus.DRAFT),
    ],
)
def test_backward_or_repeated_transitions(from_status, to_status):
    assert not PayslipStateMachine.can_transition(from_status, to_status)
    with pytest.raises(InvalidStatusTransition):
        PayslipStateMachine.validate_transition(from_status, to_status)

