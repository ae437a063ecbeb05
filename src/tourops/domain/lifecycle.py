"""Proposal and voucher status state machines."""

from dataclasses import replace

from tourops.domain.entities import Proposal, ProposalStatus, Voucher, VoucherStatus
from tourops.domain.errors import LifecycleError, invalid_transition

PROPOSAL_TRANSITIONS: dict[ProposalStatus, frozenset[ProposalStatus]] = {
    ProposalStatus.NEW: frozenset({ProposalStatus.CONFIRMED, ProposalStatus.CANCELLED}),
    ProposalStatus.CONFIRMED: frozenset({ProposalStatus.CANCELLED}),
    ProposalStatus.CANCELLED: frozenset(),
}

VOUCHER_TRANSITIONS: dict[VoucherStatus, frozenset[VoucherStatus]] = {
    VoucherStatus.PENDING_PAYMENT: frozenset({VoucherStatus.PAID, VoucherStatus.CANCELLED}),
    VoucherStatus.PAID: frozenset({VoucherStatus.COMPLETED, VoucherStatus.CANCELLED}),
    VoucherStatus.COMPLETED: frozenset({VoucherStatus.CANCELLED}),
    VoucherStatus.CANCELLED: frozenset(),
}


def can_transition_proposal(current: ProposalStatus, target: ProposalStatus) -> bool:
    return target in PROPOSAL_TRANSITIONS[current]


def transition_proposal(proposal: Proposal, target: ProposalStatus) -> Proposal:
    """Return a copy of the proposal in the target status.

    Raises:
        LifecycleError: If the transition is not allowed (including
            re-confirming and anything starting from CANCELLED)
    """
    if not can_transition_proposal(proposal.status, target):
        raise LifecycleError(
            invalid_transition("Proposal", proposal.reference, proposal.status.value, target.value)
        )
    return replace(proposal, status=target)


def ensure_items_editable(proposal: Proposal) -> None:
    """Line items may only change while the proposal is a draft."""
    if proposal.status != ProposalStatus.NEW:
        raise LifecycleError(
            f"Proposal {proposal.reference} is {proposal.status.value}; "
            "its line items can no longer be changed"
        )


def ensure_not_cancelled(proposal: Proposal) -> None:
    if proposal.status == ProposalStatus.CANCELLED:
        raise LifecycleError(f"Proposal {proposal.reference} is CANCELLED and cannot be edited")


def can_transition_voucher(current: VoucherStatus, target: VoucherStatus) -> bool:
    return target in VOUCHER_TRANSITIONS[current]


def transition_voucher(voucher: Voucher, target: VoucherStatus) -> Voucher:
    """Return a copy of the voucher in the target status.

    Raises:
        LifecycleError: If the transition is not allowed
    """
    if not can_transition_voucher(voucher.status, target):
        raise LifecycleError(
            invalid_transition("Voucher", voucher.voucher_number, voucher.status.value, target.value)
        )
    return replace(voucher, status=target)
