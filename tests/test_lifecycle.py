"""Tests for proposal and voucher status transitions."""

from datetime import datetime, UTC

import pytest

from tourops.domain.entities import ProposalStatus, ServiceCategory, Voucher, VoucherStatus
from tourops.domain.errors import LifecycleError
from tourops.domain.lifecycle import (
    can_transition_proposal,
    can_transition_voucher,
    ensure_items_editable,
    ensure_not_cancelled,
    transition_proposal,
    transition_voucher,
)


def _voucher(status: VoucherStatus) -> Voucher:
    return Voucher(
        id="v1",
        voucher_number="TOMS-2024-1000-V01",
        proposal_id="p-1",
        proposal_reference="TOMS-2024-1000",
        line_item_id="h1",
        service_type=ServiceCategory.HOTEL,
        service_data={},
        agency_id=None,
        sales_person_id=None,
        status=status,
        created_at=datetime(2024, 5, 1, tzinfo=UTC),
    )


class TestProposalTransitions:
    """Tests for the proposal state machine."""

    def test_confirm_new_proposal(self, make_proposal):
        """Test NEW -> CONFIRMED succeeds and returns a copy."""
        proposal = make_proposal()
        confirmed = transition_proposal(proposal, ProposalStatus.CONFIRMED)
        assert confirmed.status == ProposalStatus.CONFIRMED
        assert proposal.status == ProposalStatus.NEW

    def test_confirm_twice_is_rejected(self, make_proposal):
        """Test CONFIRMED -> CONFIRMED is rejected."""
        confirmed = make_proposal(status=ProposalStatus.CONFIRMED)
        with pytest.raises(LifecycleError, match="already CONFIRMED"):
            transition_proposal(confirmed, ProposalStatus.CONFIRMED)

    @pytest.mark.parametrize("target", list(ProposalStatus))
    def test_nothing_leaves_cancelled(self, make_proposal, target):
        """Test every transition starting at CANCELLED is rejected."""
        cancelled = make_proposal(status=ProposalStatus.CANCELLED)
        assert not can_transition_proposal(ProposalStatus.CANCELLED, target)
        with pytest.raises(LifecycleError):
            transition_proposal(cancelled, target)

    def test_cancel_confirmed(self, make_proposal):
        """Test CONFIRMED -> CANCELLED is allowed."""
        confirmed = make_proposal(status=ProposalStatus.CONFIRMED)
        assert transition_proposal(confirmed, ProposalStatus.CANCELLED).status == ProposalStatus.CANCELLED

    def test_confirmed_cannot_go_back_to_new(self):
        """Test there is no way back to draft."""
        assert not can_transition_proposal(ProposalStatus.CONFIRMED, ProposalStatus.NEW)

    def test_items_editable_only_while_new(self, make_proposal):
        """Test line-item edits are limited to drafts."""
        ensure_items_editable(make_proposal())
        with pytest.raises(LifecycleError, match="can no longer be changed"):
            ensure_items_editable(make_proposal(status=ProposalStatus.CONFIRMED))

    def test_cancelled_header_not_editable(self, make_proposal):
        """Test header edits are rejected once cancelled."""
        ensure_not_cancelled(make_proposal(status=ProposalStatus.CONFIRMED))
        with pytest.raises(LifecycleError):
            ensure_not_cancelled(make_proposal(status=ProposalStatus.CANCELLED))


class TestVoucherTransitions:
    """Tests for the voucher state machine."""

    def test_happy_path(self):
        """Test PENDING_PAYMENT -> PAID -> COMPLETED."""
        paid = transition_voucher(_voucher(VoucherStatus.PENDING_PAYMENT), VoucherStatus.PAID)
        completed = transition_voucher(paid, VoucherStatus.COMPLETED)
        assert completed.status == VoucherStatus.COMPLETED

    @pytest.mark.parametrize(
        "status", [VoucherStatus.PENDING_PAYMENT, VoucherStatus.PAID, VoucherStatus.COMPLETED]
    )
    def test_cancel_from_any_open_state(self, status):
        """Test any non-cancelled voucher can be cancelled."""
        cancelled = transition_voucher(_voucher(status), VoucherStatus.CANCELLED)
        assert cancelled.status == VoucherStatus.CANCELLED

    def test_paid_cannot_go_back_to_pending(self):
        """Test PAID -> PENDING_PAYMENT is rejected."""
        with pytest.raises(LifecycleError, match="Cannot change voucher"):
            transition_voucher(_voucher(VoucherStatus.PAID), VoucherStatus.PENDING_PAYMENT)

    def test_pending_cannot_skip_to_completed(self):
        """Test a voucher must be paid before completion."""
        assert not can_transition_voucher(VoucherStatus.PENDING_PAYMENT, VoucherStatus.COMPLETED)

    @pytest.mark.parametrize("target", list(VoucherStatus))
    def test_nothing_leaves_cancelled(self, target):
        """Test every transition starting at CANCELLED is rejected."""
        with pytest.raises(LifecycleError):
            transition_voucher(_voucher(VoucherStatus.CANCELLED), target)
