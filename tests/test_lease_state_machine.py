"""Lease status transitions: every legal move and a sample of illegal ones."""

import pytest

from rentlink_backend.core.exceptions import InvalidLeaseTransition
from rentlink_backend.modules.leases.models import LeaseStatus
from rentlink_backend.modules.leases.state_machine import (
    SIGNABLE_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    LeaseAction,
    can_transition,
    next_status,
)


class TestLegalTransitions:
    @pytest.mark.parametrize(
        "current, action, expected",
        [
            (LeaseStatus.DRAFT, LeaseAction.SEND, LeaseStatus.SENT_TO_TENANT),
            (LeaseStatus.REVISION_REQUESTED, LeaseAction.SEND, LeaseStatus.SENT_TO_TENANT),
            (LeaseStatus.SENT_TO_TENANT, LeaseAction.SIGN, LeaseStatus.TENANT_SIGNED),
            (LeaseStatus.REVISION_REQUESTED, LeaseAction.SIGN, LeaseStatus.TENANT_SIGNED),
            (LeaseStatus.TENANT_SIGNED, LeaseAction.APPROVE, LeaseStatus.APPROVED),
            (
                LeaseStatus.TENANT_SIGNED,
                LeaseAction.REQUEST_REVISION,
                LeaseStatus.REVISION_REQUESTED,
            ),
            (LeaseStatus.DRAFT, LeaseAction.REJECT, LeaseStatus.REJECTED),
            (LeaseStatus.SENT_TO_TENANT, LeaseAction.REJECT, LeaseStatus.REJECTED),
            (LeaseStatus.TENANT_SIGNED, LeaseAction.REJECT, LeaseStatus.REJECTED),
            (LeaseStatus.APPROVED, LeaseAction.TERMINATE, LeaseStatus.TERMINATED),
            (LeaseStatus.APPROVED, LeaseAction.EXPIRE, LeaseStatus.EXPIRED),
        ],
    )
    def test_next_status(self, current, action, expected):
        assert next_status(current, action) == expected
        assert can_transition(current, action)

    def test_editing_keeps_status(self):
        assert next_status(LeaseStatus.DRAFT, LeaseAction.EDIT) == LeaseStatus.DRAFT
        assert (
            next_status(LeaseStatus.REVISION_REQUESTED, LeaseAction.EDIT)
            == LeaseStatus.REVISION_REQUESTED
        )


class TestIllegalTransitions:
    @pytest.mark.parametrize(
        "current, action",
        [
            (LeaseStatus.DRAFT, LeaseAction.SIGN),
            (LeaseStatus.DRAFT, LeaseAction.APPROVE),
            (LeaseStatus.SENT_TO_TENANT, LeaseAction.APPROVE),
            (LeaseStatus.SENT_TO_TENANT, LeaseAction.SEND),
            (LeaseStatus.TENANT_SIGNED, LeaseAction.SIGN),
            (LeaseStatus.TENANT_SIGNED, LeaseAction.EDIT),
            (LeaseStatus.APPROVED, LeaseAction.APPROVE),
            (LeaseStatus.APPROVED, LeaseAction.REJECT),
            (LeaseStatus.EXPIRED, LeaseAction.TERMINATE),
        ],
    )
    def test_raises(self, current, action):
        assert not can_transition(current, action)
        with pytest.raises(InvalidLeaseTransition) as exc_info:
            next_status(current, action)
        assert exc_info.value.current_status == current.value
        assert exc_info.value.action == action.value
        assert exc_info.value.status_code == 409

    @pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES, key=lambda s: s.value))
    def test_terminal_statuses_have_no_exit(self, terminal):
        for action in LeaseAction:
            assert not can_transition(terminal, action)

    def test_message_names_action_and_status(self):
        with pytest.raises(InvalidLeaseTransition, match="request revision lease in 'draft'"):
            next_status(LeaseStatus.DRAFT, LeaseAction.REQUEST_REVISION)


def test_every_action_has_a_row():
    assert set(TRANSITIONS) == set(LeaseAction)


def test_signable_statuses():
    assert SIGNABLE_STATUSES == {LeaseStatus.SENT_TO_TENANT, LeaseStatus.REVISION_REQUESTED}
