"""Tests for ProposalService: validation, persistence, lifecycle and bulk actions."""

import logging
import re
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

import pytest

from tourops.database import sqlalchemy_db
from tourops.domain.entities import BulkOutcomeKind, ProposalStatus, ServiceCategory, VoucherStatus
from tourops.domain.errors import LifecycleError, NotFoundError, ValidationError
from tourops.domain.proposal import price_breakdown
from tourops.utils.resolvers import display_name


class TestCreateProposal:
    """Tests for creating proposals."""

    def test_create_proposal(self, proposal_service, master_data):
        """Test a valid proposal is stored as NEW with defaults and a reference."""
        proposal = proposal_service.create_proposal(
            source_id=master_data["direct"],
            destination_ids=[master_data["istanbul"], master_data["cappadocia"]],
        )

        assert re.fullmatch(r"TOMS-\d{4}-\d{4}", proposal.reference)
        assert proposal.status == ProposalStatus.NEW
        assert proposal.overall_margin == "15"
        assert proposal.commission == "5"
        assert proposal.pdf_language == "arabic"

        stored = proposal_service.get_proposal(proposal.id)
        assert stored.reference == proposal.reference
        assert stored.destination_ids == (master_data["istanbul"], master_data["cappadocia"])

    def test_missing_required_fields(self, proposal_service, master_data):
        """Test field-level errors and that nothing is written."""
        with pytest.raises(ValidationError) as exc_info:
            proposal_service.create_proposal(source_id=None, destination_ids=[])

        assert set(exc_info.value.field_errors) == {"source_id", "destination_ids"}
        assert proposal_service.list_proposals() == []

    def test_agency_channel_requires_agency(self, proposal_service, master_data):
        """Test a B2B source needs an agency."""
        with pytest.raises(ValidationError) as exc_info:
            proposal_service.create_proposal(
                source_id=master_data["b2b"], destination_ids=[master_data["istanbul"]]
            )
        assert "agency_id" in exc_info.value.field_errors

        proposal = proposal_service.create_proposal(
            source_id=master_data["b2b"],
            destination_ids=[master_data["istanbul"]],
            agency_id=master_data["agency"],
        )
        assert proposal.agency_id == master_data["agency"]

    def test_unknown_references_rejected(self, proposal_service, master_data):
        """Test new references must exist in master data."""
        with pytest.raises(ValidationError) as exc_info:
            proposal_service.create_proposal(
                source_id=999, destination_ids=[master_data["istanbul"], 555], sales_person_id=42
            )
        errors = exc_info.value.field_errors
        assert "source_id" in errors
        assert "555" in errors["destination_ids"]
        assert "sales_person_id" in errors


class TestLineItems:
    """Tests for editing line items through the service."""

    def test_items_are_persisted(self, proposal_service, draft_proposal):
        """Test stored items round-trip with derived totals."""
        stored = proposal_service.get_proposal(draft_proposal.id)
        assert len(stored.hotels) == 1
        assert len(stored.flights) == 1
        assert stored.hotels[0] == draft_proposal.hotels[0]

        breakdown = price_breakdown(stored)
        assert breakdown.category_subtotals[ServiceCategory.HOTEL] == Decimal("600")
        assert breakdown.subtotal == Decimal("1100")
        assert breakdown.final_price == Decimal("1320")

    def test_update_item(self, proposal_service, draft_proposal):
        """Test changing checkout recomputes the hotel total."""
        hotel_id = draft_proposal.hotels[0].id
        proposal_service.update_item(
            draft_proposal.id, ServiceCategory.HOTEL, hotel_id, checkout="2024-06-06"
        )
        stored = proposal_service.get_proposal(draft_proposal.id)
        assert price_breakdown(stored).category_subtotals[ServiceCategory.HOTEL] == Decimal("1000")

    def test_relative_dates_stored_as_iso(self, proposal_service, voucher_service, draft_proposal):
        """Test "tomorrow" is resolved once and stored, so the stay never drifts."""
        tomorrow = date.today() + timedelta(days=1)
        proposal = proposal_service.add_item(
            draft_proposal.id,
            ServiceCategory.HOTEL,
            checkin="tomorrow",
            checkout=(tomorrow + timedelta(days=2)).isoformat(),
            price_per_night="50",
        )
        hotel = proposal.hotels[1]
        assert hotel.checkin == tomorrow.isoformat()
        assert proposal_service.get_proposal(draft_proposal.id).hotels[1].checkin == tomorrow.isoformat()

        _, vouchers = proposal_service.confirm_proposal(draft_proposal.id)
        snapshot = vouchers[1].service_data
        assert snapshot["checkin"] == tomorrow.isoformat()
        assert snapshot["nights"] == 2
        assert snapshot["total_price"] == "100.00"

    def test_update_item_normalizes_dates(self, proposal_service, draft_proposal):
        """Test dates typed in other formats are stored as ISO on update."""
        proposal = proposal_service.update_item(
            draft_proposal.id,
            ServiceCategory.HOTEL,
            draft_proposal.hotels[0].id,
            checkout="June 5, 2024",
        )
        assert proposal.hotels[0].checkout == "2024-06-05"
        assert price_breakdown(proposal).category_subtotals[ServiceCategory.HOTEL] == Decimal("800")

    def test_remove_and_duplicate_item(self, proposal_service, draft_proposal):
        """Test removing and duplicating items."""
        flight_id = draft_proposal.flights[0].id
        hotel_id = draft_proposal.hotels[0].id

        proposal_service.remove_item(draft_proposal.id, ServiceCategory.FLIGHT, flight_id)
        proposal_service.duplicate_item(draft_proposal.id, ServiceCategory.HOTEL, hotel_id)

        stored = proposal_service.get_proposal(draft_proposal.id)
        assert stored.flights == ()
        assert len(stored.hotels) == 2
        assert stored.hotels[0].id == hotel_id
        assert stored.hotels[1].id != hotel_id

    def test_unknown_item(self, proposal_service, draft_proposal):
        """Test editing a missing item."""
        with pytest.raises(NotFoundError):
            proposal_service.remove_item(draft_proposal.id, ServiceCategory.HOTEL, "missing")

    def test_items_frozen_after_confirmation(self, proposal_service, draft_proposal):
        """Test line items cannot change once confirmed."""
        proposal_service.confirm_proposal(draft_proposal.id)
        with pytest.raises(LifecycleError):
            proposal_service.add_item(draft_proposal.id, ServiceCategory.FLIGHT, pax=1)

    def test_mixed_currencies_logged(self, proposal_service, draft_proposal, caplog):
        """Test a warning when a proposal mixes currencies."""
        with caplog.at_level(logging.WARNING, logger="tourops.domain.proposal"):
            proposal_service.add_item(
                draft_proposal.id, ServiceCategory.RENT_A_CAR, price_per_day="30", currency="EUR"
            )
        assert "mixes currencies" in caplog.text


class TestHeaderUpdates:
    """Tests for updating proposal header fields."""

    def test_update_margin_after_confirmation(self, proposal_service, draft_proposal):
        """Test header fields stay editable while CONFIRMED."""
        proposal_service.confirm_proposal(draft_proposal.id)
        updated = proposal_service.update_proposal(draft_proposal.id, overall_margin="20")
        assert updated.overall_margin == "20"
        assert price_breakdown(updated).final_price == Decimal("1375")

    def test_update_rejects_unknown_field(self, proposal_service, draft_proposal):
        """Test status and reference are not header fields."""
        with pytest.raises(ValidationError):
            proposal_service.update_proposal(draft_proposal.id, status=ProposalStatus.CONFIRMED)

    def test_update_cancelled_rejected(self, proposal_service, draft_proposal):
        """Test cancelled proposals are read only."""
        proposal_service.cancel_proposal(draft_proposal.id)
        with pytest.raises(LifecycleError):
            proposal_service.update_proposal(draft_proposal.id, commission="7")

    def test_dangling_source_tolerated(
        self, proposal_service, source_service, draft_proposal, master_data
    ):
        """Test a deleted source does not block unrelated edits."""
        source_service.delete_source(master_data["direct"])

        updated = proposal_service.update_proposal(draft_proposal.id, estimated_nights="4")
        assert updated.estimated_nights == "4"
        assert display_name(source_service.get_source(updated.source_id)) == "Unknown"


class TestLifecycle:
    """Tests for confirmation, cancellation, duplication and deletion."""

    def test_confirm_issues_one_voucher_per_item(self, proposal_service, voucher_service, draft_proposal):
        """Test confirmation creates numbered vouchers with snapshots."""
        confirmed, vouchers = proposal_service.confirm_proposal(draft_proposal.id)

        assert confirmed.status == ProposalStatus.CONFIRMED
        assert [v.voucher_number for v in vouchers] == [
            f"{confirmed.reference}-V01",
            f"{confirmed.reference}-V02",
        ]
        hotel_voucher = vouchers[0]
        assert hotel_voucher.service_type == ServiceCategory.HOTEL
        assert hotel_voucher.status == VoucherStatus.PENDING_PAYMENT
        assert hotel_voucher.service_data["nights"] == 3
        assert hotel_voucher.service_data["total_price"] == "600.00"
        assert hotel_voucher.guests == ()

        stored = voucher_service.list_vouchers(proposal_id=draft_proposal.id)
        assert [v.id for v in stored] == [v.id for v in vouchers]

    def test_failed_voucher_save_keeps_proposal_new(
        self, proposal_service, voucher_service, draft_proposal, monkeypatch
    ):
        """Test confirmation is all or nothing when a voucher cannot be stored."""
        original = sqlalchemy_db.apply_voucher_to_orm

        def failing_apply(voucher, row):
            if voucher.voucher_number.endswith("-V02"):
                raise RuntimeError("voucher write failed")
            original(voucher, row)

        monkeypatch.setattr(sqlalchemy_db, "apply_voucher_to_orm", failing_apply)
        with pytest.raises(RuntimeError):
            proposal_service.confirm_proposal(draft_proposal.id)

        assert proposal_service.get_proposal(draft_proposal.id).status == ProposalStatus.NEW
        assert voucher_service.list_vouchers(proposal_id=draft_proposal.id) == []

        monkeypatch.setattr(sqlalchemy_db, "apply_voucher_to_orm", original)
        confirmed, vouchers = proposal_service.confirm_proposal(draft_proposal.id)
        assert confirmed.status == ProposalStatus.CONFIRMED
        assert len(vouchers) == 2

    def test_confirm_twice_rejected(self, proposal_service, draft_proposal):
        """Test a confirmed proposal cannot be confirmed again."""
        proposal_service.confirm_proposal(draft_proposal.id)
        with pytest.raises(LifecycleError, match="already CONFIRMED"):
            proposal_service.confirm_proposal(draft_proposal.id)

    def test_voucher_snapshot_survives_proposal_edits(
        self, proposal_service, voucher_service, draft_proposal
    ):
        """Test later proposal edits never reach issued vouchers."""
        _, vouchers = proposal_service.confirm_proposal(draft_proposal.id)
        before = dict(vouchers[0].service_data)

        proposal_service.update_proposal(draft_proposal.id, overall_margin="40")
        copy = proposal_service.duplicate(draft_proposal.id)
        proposal_service.update_item(
            copy.id, ServiceCategory.HOTEL, copy.hotels[0].id, price_per_night="999"
        )

        assert voucher_service.get_voucher(vouchers[0].id).service_data == before

    def test_cancel_from_confirmed(self, proposal_service, draft_proposal):
        """Test CONFIRMED proposals can be cancelled, and only once."""
        proposal_service.confirm_proposal(draft_proposal.id)
        cancelled = proposal_service.cancel_proposal(draft_proposal.id)
        assert cancelled.status == ProposalStatus.CANCELLED
        with pytest.raises(LifecycleError):
            proposal_service.cancel_proposal(draft_proposal.id)
        with pytest.raises(LifecycleError):
            proposal_service.confirm_proposal(draft_proposal.id)

    def test_duplicate(self, proposal_service, draft_proposal):
        """Test duplicating stores a fresh draft."""
        proposal_service.confirm_proposal(draft_proposal.id)
        copy = proposal_service.duplicate(draft_proposal.id)

        assert copy.id != draft_proposal.id
        assert copy.reference != draft_proposal.reference
        assert copy.status == ProposalStatus.NEW
        stored = proposal_service.get_proposal(copy.id)
        assert {i.id for i in stored.all_items()}.isdisjoint(
            {i.id for i in draft_proposal.all_items()}
        )

    def test_delete_keeps_vouchers(self, proposal_service, voucher_service, draft_proposal):
        """Test issued vouchers outlive their proposal."""
        _, vouchers = proposal_service.confirm_proposal(draft_proposal.id)
        proposal_service.delete_proposal(draft_proposal.id)

        assert proposal_service.get_proposal(draft_proposal.id) is None
        assert voucher_service.get_voucher(vouchers[0].id) is not None

    def test_delete_unknown(self, proposal_service):
        """Test deleting a missing proposal."""
        with pytest.raises(NotFoundError):
            proposal_service.delete_proposal("missing")


class TestQueries:
    """Tests for finding and listing proposals."""

    def test_find_by_reference(self, proposal_service, draft_proposal):
        """Test lookup by ID or reference."""
        assert proposal_service.find_proposal(draft_proposal.reference).id == draft_proposal.id
        assert proposal_service.find_proposal(draft_proposal.id).id == draft_proposal.id
        with pytest.raises(NotFoundError):
            proposal_service.find_proposal("TOMS-1999-0000")

    def test_list_search_and_filters(self, proposal_service, draft_proposal, master_data):
        """Test search by destination name and status filter."""
        other = proposal_service.create_proposal(
            source_id=master_data["direct"], destination_ids=[master_data["cappadocia"]]
        )
        proposal_service.cancel_proposal(other.id)

        assert [p.id for p in proposal_service.list_proposals(search="istan")] == [draft_proposal.id]
        assert [p.id for p in proposal_service.list_proposals(search=other.reference)] == [other.id]
        cancelled = proposal_service.list_proposals(status=ProposalStatus.CANCELLED)
        assert [p.id for p in cancelled] == [other.id]
        assert len(proposal_service.list_proposals(source_id=master_data["direct"])) == 2


class TestPaginate:
    """Tests for paging through listings."""

    def test_pages_of_ten(self, proposal_service):
        """Test full pages and a partial last page."""
        items = list(range(23))

        first = proposal_service.paginate(items, 1)
        assert first.items == tuple(range(10))
        assert first.total_items == 23
        assert first.total_pages == 3

        last = proposal_service.paginate(items, 3)
        assert last.items == (20, 21, 22)
        assert last.number == 3

    def test_custom_page_size(self, proposal_service):
        """Test per_page controls the slice."""
        page = proposal_service.paginate(list("abcdefg"), 2, per_page=3)
        assert page.items == ("d", "e", "f")
        assert page.total_pages == 3

    def test_empty_listing(self, proposal_service):
        """Test an empty listing has no pages and an empty first page."""
        page = proposal_service.paginate([], 1)
        assert page.items == ()
        assert page.total_pages == 0

    def test_page_past_the_end_is_empty(self, proposal_service):
        """Test a page beyond the last one is empty."""
        page = proposal_service.paginate(list(range(5)), 4, per_page=2)
        assert page.items == ()
        assert page.total_pages == 3

    @pytest.mark.parametrize(
        "page, per_page, field", [(0, 10, "page"), (-1, 10, "page"), (1, 0, "per_page")]
    )
    def test_invalid_page_arguments(self, proposal_service, page, per_page, field):
        """Test pages are numbered from 1 and hold at least one item."""
        with pytest.raises(ValidationError) as exc_info:
            proposal_service.paginate([1, 2, 3], page, per_page=per_page)
        assert field in exc_info.value.field_errors


class TestSaveProposal:
    """Tests for storing a whole edited proposal."""

    def test_save_replaces_stored_proposal(self, proposal_service, draft_proposal):
        """Test a whole replacement is validated and stored."""
        edited = replace(draft_proposal, overall_margin="20", flights=())
        proposal_service.save_proposal(edited)

        stored = proposal_service.get_proposal(draft_proposal.id)
        assert stored.overall_margin == "20"
        assert stored.flights == ()

    def test_save_validates(self, proposal_service, draft_proposal):
        """Test required fields are enforced on save."""
        with pytest.raises(ValidationError):
            proposal_service.save_proposal(replace(draft_proposal, destination_ids=()))

    def test_save_cannot_change_items_after_confirmation(self, proposal_service, draft_proposal):
        """Test confirmed line items stay frozen, but header fields do not."""
        confirmed, _ = proposal_service.confirm_proposal(draft_proposal.id)
        with pytest.raises(LifecycleError):
            proposal_service.save_proposal(replace(confirmed, flights=()))

        proposal_service.save_proposal(replace(confirmed, commission="8"))
        assert proposal_service.get_proposal(confirmed.id).commission == "8"

    def test_save_cannot_change_status(self, proposal_service, draft_proposal):
        """Test status only moves through confirm and cancel."""
        with pytest.raises(LifecycleError):
            proposal_service.save_proposal(replace(draft_proposal, status=ProposalStatus.CONFIRMED))


class TestBulkActions:
    """Tests for bulk confirm, cancel and delete."""

    def _create(self, proposal_service, master_data, count):
        return [
            proposal_service.create_proposal(
                source_id=master_data["direct"], destination_ids=[master_data["istanbul"]]
            )
            for _ in range(count)
        ]

    def test_bulk_confirm_skips_cancelled(self, proposal_service, master_data):
        """Test two eligible proposals confirm and the cancelled one is skipped."""
        first, second, third = self._create(proposal_service, master_data, 3)
        proposal_service.cancel_proposal(second.id)

        result = proposal_service.bulk_confirm([first.id, second.id, third.id])

        assert result.applied == [first.id, third.id]
        assert result.skipped == [second.id]
        assert result.failed == []
        assert proposal_service.get_proposal(first.id).status == ProposalStatus.CONFIRMED
        assert proposal_service.get_proposal(second.id).status == ProposalStatus.CANCELLED
        assert proposal_service.get_proposal(third.id).status == ProposalStatus.CONFIRMED

    def test_bulk_reports_unknown_ids_as_failed(self, proposal_service, master_data):
        """Test a missing proposal does not abort the batch."""
        (proposal,) = self._create(proposal_service, master_data, 1)
        result = proposal_service.bulk_cancel(["missing", proposal.id])

        assert result.failed == ["missing"]
        assert result.applied == [proposal.id]
        assert result.outcomes[0].kind == BulkOutcomeKind.FAILED

    def test_bulk_delete(self, proposal_service, master_data):
        """Test deleting several proposals."""
        proposals = self._create(proposal_service, master_data, 2)
        result = proposal_service.bulk_delete([p.id for p in proposals])
        assert len(result.applied) == 2
        assert proposal_service.list_proposals() == []
