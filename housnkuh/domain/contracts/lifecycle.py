"""Contract status machine"""

from datetime import date
from enum import Enum

from ...shared.exceptions import StateError


class ContractStatus(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS = {
    ContractStatus.PENDING: {ContractStatus.SCHEDULED, ContractStatus.CANCELLED},
    ContractStatus.SCHEDULED: {ContractStatus.ACTIVE, ContractStatus.CANCELLED},
    ContractStatus.ACTIVE: {ContractStatus.CANCELLED},
    ContractStatus.CANCELLED: set(),
}

# Statuses whose impact window blocks a rental unit
BLOCKING_STATUSES = (
    ContractStatus.PENDING.value,
    ContractStatus.SCHEDULED.value,
    ContractStatus.ACTIVE.value,
)


def can_transition(current, target) -> bool:
    return ContractStatus(target) in ALLOWED_TRANSITIONS[ContractStatus(current)]


def ensure_transition(current, target) -> ContractStatus:
    """Return the target status or raise StateError if the move is not allowed"""
    current_status = ContractStatus(current)
    target_status = ContractStatus(target)
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise StateError(
            f"Cannot change contract status from '{current_status.value}' to '{target_status.value}'",
            context={"from": current_status.value, "to": target_status.value},
        )
    return target_status


def effective_status(status, scheduled_start: date, today: date) -> ContractStatus:
    """
    Status as of ``today`` without touching the stored value.

    A scheduled contract counts as active from its start date on; every other
    status is returned as stored.
    """
    current = ContractStatus(status)
    if current == ContractStatus.SCHEDULED and scheduled_start is not None and today >= scheduled_start:
        return ContractStatus.ACTIVE
    return current
