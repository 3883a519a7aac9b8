"""Lease status transitions.

The table below is the complete set of legal moves. Services ask
``next_status`` before writing anything, so an illegal action never
changes a lease.
"""

import enum

from ...core.exceptions import InvalidLeaseTransition
from .models import LeaseStatus


class LeaseAction(str, enum.Enum):
    SEND = "send"
    SIGN = "sign"
    APPROVE = "approve"
    REQUEST_REVISION = "request_revision"
    REJECT = "reject"
    TERMINATE = "terminate"
    EXPIRE = "expire"
    EDIT = "edit"


TRANSITIONS: dict[LeaseAction, dict[LeaseStatus, LeaseStatus]] = {
    LeaseAction.SEND: {
        LeaseStatus.DRAFT: LeaseStatus.SENT_TO_TENANT,
        LeaseStatus.REVISION_REQUESTED: LeaseStatus.SENT_TO_TENANT,
    },
    LeaseAction.SIGN: {
        LeaseStatus.SENT_TO_TENANT: LeaseStatus.TENANT_SIGNED,
        LeaseStatus.REVISION_REQUESTED: LeaseStatus.TENANT_SIGNED,
    },
    LeaseAction.APPROVE: {
        LeaseStatus.TENANT_SIGNED: LeaseStatus.APPROVED,
    },
    LeaseAction.REQUEST_REVISION: {
        LeaseStatus.TENANT_SIGNED: LeaseStatus.REVISION_REQUESTED,
    },
    LeaseAction.REJECT: {
        LeaseStatus.DRAFT: LeaseStatus.REJECTED,
        LeaseStatus.SENT_TO_TENANT: LeaseStatus.REJECTED,
        LeaseStatus.TENANT_SIGNED: LeaseStatus.REJECTED,
        LeaseStatus.REVISION_REQUESTED: LeaseStatus.REJECTED,
    },
    LeaseAction.TERMINATE: {
        LeaseStatus.APPROVED: LeaseStatus.TERMINATED,
    },
    LeaseAction.EXPIRE: {
        LeaseStatus.APPROVED: LeaseStatus.EXPIRED,
    },
    # Editing terms keeps the status; it is only allowed before the tenant signs
    LeaseAction.EDIT: {
        LeaseStatus.DRAFT: LeaseStatus.DRAFT,
        LeaseStatus.REVISION_REQUESTED: LeaseStatus.REVISION_REQUESTED,
    },
}

TERMINAL_STATUSES = frozenset(
    {LeaseStatus.REJECTED, LeaseStatus.EXPIRED, LeaseStatus.TERMINATED}
)

# Statuses in which the tenant may attach documents before signing
SIGNABLE_STATUSES = frozenset(TRANSITIONS[LeaseAction.SIGN])


def can_transition(current: LeaseStatus, action: LeaseAction) -> bool:
    return current in TRANSITIONS[action]


def next_status(current: LeaseStatus, action: LeaseAction) -> LeaseStatus:
    """Return the status a lease moves to for an action.

    Raises:
        InvalidLeaseTransition: If the action is not allowed from ``current``
    """
    try:
        return TRANSITIONS[action][current]
    except KeyError:
        raise InvalidLeaseTransition(current.value, action.value) from None
