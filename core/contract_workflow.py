"""
Contract workflow table.

Maps (current status, action) to the next status and the party allowed to
perform the action. Everything that moves a contract goes through
`plan_transition`, so a move that is missing from the table can never be
written.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.errors import inappropriate_action, insufficient_rights
from database.models.contracts import ContractStatus


class ContractAction(str, Enum):
    """Actions a party can take on an existing contract."""
    ACCEPT = "accept"
    DEPLOY = "deploy"
    SIGN = "sign"
    FUND = "fund"
    APPROVE = "approve"
    COMPLETE = "complete"


class ContractRole(str, Enum):
    """Side of a contract a person is on."""
    CUSTOMER = "customer"
    PERFORMER = "performer"


@dataclass(frozen=True)
class Transition:
    source: ContractStatus
    action: ContractAction
    target: ContractStatus
    actor: ContractRole
    # stored contract address must be well formed before the move
    needs_address: bool = True


TRANSITIONS: dict[tuple[ContractStatus, ContractAction], Transition] = {
    (t.source, t.action): t
    for t in (
        Transition(ContractStatus.CREATED, ContractAction.ACCEPT, ContractStatus.ACCEPTED, ContractRole.PERFORMER, needs_address=False),
        Transition(ContractStatus.ACCEPTED, ContractAction.DEPLOY, ContractStatus.DEPLOYED, ContractRole.CUSTOMER, needs_address=False),
        Transition(ContractStatus.DEPLOYED, ContractAction.SIGN, ContractStatus.SIGNED, ContractRole.PERFORMER),
        Transition(ContractStatus.SIGNED, ContractAction.FUND, ContractStatus.FUNDED, ContractRole.CUSTOMER),
        Transition(ContractStatus.FUNDED, ContractAction.APPROVE, ContractStatus.APPROVED, ContractRole.CUSTOMER),
        Transition(ContractStatus.APPROVED, ContractAction.COMPLETE, ContractStatus.COMPLETED, ContractRole.PERFORMER),
    )
}

ACTOR_BY_ACTION: dict[ContractAction, ContractRole] = {
    t.action: t.actor for t in TRANSITIONS.values()
}

TERMINAL_STATUSES = frozenset(
    s for s in ContractStatus if not any(src == s for src, _ in TRANSITIONS)
)


def plan_transition(
    current: ContractStatus,
    action: ContractAction,
    role: Optional[ContractRole],
) -> Transition:
    """
    Check that `role` may perform `action` from `current`.

    Args:
        current: Status the contract is in now
        action: Requested action
        role: Caller's side of the contract, None for a stranger

    Returns:
        The matching Transition

    Raises:
        ServiceError: insufficient rights for the wrong party,
            inappropriate action when the status does not allow the action
    """
    if role != ACTOR_BY_ACTION[action]:
        raise insufficient_rights()
    step = TRANSITIONS.get((current, action))
    if step is None:
        raise inappropriate_action()
    return step
