"""Proposal aggregation, line-item editing and the proposal domain service.

The module-level functions are pure: they take a ``Proposal`` and return a
new one with the affected collection replaced, never mutating the input.
``ProposalService`` adds validation, persistence and the status lifecycle on
top of them.
"""

import logging
import random
from dataclasses import replace
from datetime import datetime, UTC
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Sequence
from uuid import uuid4

from tourops.database.base import Database
from tourops.domain.entities import (
    BulkOutcome,
    BulkOutcomeKind,
    BulkResult,
    CATEGORY_FIELDS,
    LineItem,
    Page,
    PricingBreakdown,
    Proposal,
    ProposalStatus,
    ServiceCategory,
    Voucher,
)
from tourops.domain.errors import (
    ConflictError,
    DomainError,
    LifecycleError,
    NotFoundError,
    ValidationError,
    line_item_not_found,
    proposal_not_found,
)
from tourops.domain.lifecycle import (
    ensure_items_editable,
    ensure_not_cancelled,
    transition_proposal,
)
from tourops.domain.line_items import (
    find_item,
    new_line_item,
    reidentified,
    with_changes,
)
from tourops.domain.pricing import compute_line_total
from tourops.domain.voucher import generate_vouchers
from tourops.utils.money import ZERO, percent_rate

logger = logging.getLogger(__name__)

DEFAULT_MARGIN = "15"
DEFAULT_COMMISSION = "5"
DEFAULT_PDF_LANGUAGE = "arabic"
DEFAULT_DISPLAY_CURRENCY = "usd"
REFERENCE_PREFIX = "TOMS"
REFERENCE_ATTEMPTS = 50
DEFAULT_PER_PAGE = 10

# Header fields that may be edited after creation
EDITABLE_FIELDS = frozenset(
    {
        "source_id",
        "agency_id",
        "sales_person_id",
        "destination_ids",
        "overall_margin",
        "commission",
        "estimated_nights",
        "pdf_language",
        "display_currency",
    }
)


# Aggregation


def category_subtotals(proposal: Proposal) -> dict[ServiceCategory, Decimal]:
    """Sum of line totals per category (every category present, possibly 0)."""
    return {
        category: sum((compute_line_total(item) for item in proposal.items(category)), ZERO)
        for category in ServiceCategory
    }


def grand_subtotal(proposal: Proposal) -> Decimal:
    """Net cost of the whole proposal across all five categories."""
    return sum(category_subtotals(proposal).values(), ZERO)


def final_sale_price(proposal: Proposal) -> Decimal:
    """Subtotal plus margin plus commission, both taken on the same net subtotal."""
    subtotal = grand_subtotal(proposal)
    margin_amount = subtotal * percent_rate(proposal.overall_margin)
    commission_amount = subtotal * percent_rate(proposal.commission)
    return subtotal + margin_amount + commission_amount


def proposal_currencies(proposal: Proposal) -> tuple[str, ...]:
    """Distinct currencies used by the proposal's line items, sorted."""
    return tuple(sorted({item.currency.upper() for item in proposal.all_items() if item.currency}))


def price_breakdown(proposal: Proposal) -> PricingBreakdown:
    """Every derived total of a proposal in one value.

    Line totals in different currencies are summed as raw numbers without
    conversion; ``mixed_currencies`` on the result flags when that happened.
    """
    subtotals = category_subtotals(proposal)
    subtotal = sum(subtotals.values(), ZERO)
    margin_amount = subtotal * percent_rate(proposal.overall_margin)
    commission_amount = subtotal * percent_rate(proposal.commission)
    return PricingBreakdown(
        category_subtotals=subtotals,
        subtotal=subtotal,
        margin_amount=margin_amount,
        commission_amount=commission_amount,
        final_price=subtotal + margin_amount + commission_amount,
        currencies=proposal_currencies(proposal),
    )


# Line-item editing (whole-collection replacement)


def _replace_items(
    proposal: Proposal, category: ServiceCategory, items: Iterable[LineItem]
) -> Proposal:
    return replace(proposal, **{CATEGORY_FIELDS[category]: tuple(items)})


def _index_of(proposal: Proposal, category: ServiceCategory, item_id: str) -> int:
    index = find_item(proposal.items(category), item_id)
    if index is None:
        raise NotFoundError(line_item_not_found(category.label, item_id))
    return index


def add_line_item(proposal: Proposal, category: ServiceCategory, **values: Any) -> Proposal:
    """Append a new line item with category defaults and a fresh id."""
    item = new_line_item(category, **values)
    return _replace_items(proposal, category, (*proposal.items(category), item))


def update_line_item(
    proposal: Proposal, category: ServiceCategory, item_id: str, **changes: Any
) -> Proposal:
    """Replace one line item with a copy carrying the given field changes."""
    items = list(proposal.items(category))
    index = _index_of(proposal, category, item_id)
    items[index] = with_changes(items[index], **changes)
    return _replace_items(proposal, category, items)


def remove_line_item(proposal: Proposal, category: ServiceCategory, item_id: str) -> Proposal:
    """Drop one line item. An empty category collection is allowed."""
    _index_of(proposal, category, item_id)
    return _replace_items(
        proposal, category, (item for item in proposal.items(category) if item.id != item_id)
    )


def duplicate_line_item(proposal: Proposal, category: ServiceCategory, item_id: str) -> Proposal:
    """Append a copy of one line item with a fresh id."""
    items = proposal.items(category)
    index = _index_of(proposal, category, item_id)
    return _replace_items(proposal, category, (*items, reidentified(items[index])))


def generate_reference(created_at: datetime, rng: Optional[random.Random] = None) -> str:
    """Human readable reference such as ``TOMS-2024-4821``."""
    rng = rng or random.Random()
    return f"{REFERENCE_PREFIX}-{created_at.year}-{rng.randint(1000, 9999)}"


def duplicate_proposal(
    source: Proposal, reference: str, now: Optional[datetime] = None
) -> Proposal:
    """Copy a proposal as a new draft.

    The copy gets a fresh id, the given reference, status NEW, a new creation
    time and fresh ids on every line item, so nothing is shared with the source.
    """
    copy = replace(
        source,
        id=uuid4().hex,
        reference=reference,
        status=ProposalStatus.NEW,
        created_at=now or datetime.now(UTC),
    )
    for category in ServiceCategory:
        copy = _replace_items(copy, category, (reidentified(i) for i in source.items(category)))
    return copy


def paginate(items: Sequence[Any], page: int, per_page: int = DEFAULT_PER_PAGE) -> Page:
    """Slice one 1-based page out of a listing.

    A page past the last one is empty rather than an error, so a listing
    that shrank between requests still renders.

    Raises:
        ValidationError: If page or per_page is below 1
    """
    errors = {}
    if page < 1:
        errors["page"] = "pages are numbered from 1"
    if per_page < 1:
        errors["per_page"] = "at least one item per page is required"
    if errors:
        raise ValidationError(errors)
    start = (page - 1) * per_page
    return Page(
        items=tuple(items[start : start + per_page]),
        number=page,
        per_page=per_page,
        total_items=len(items),
    )


class ProposalService:
    """Service for managing proposals and their lifecycle."""

    def __init__(self, db: Database, rng: Optional[random.Random] = None):
        """Initialize proposal service.

        Args:
            db: Database instance
            rng: Optional random generator used for references
        """
        self.db = db
        self.rng = rng or random.Random()

    # Validation

    def validate(self, proposal: Proposal, previous: Optional[Proposal] = None) -> dict[str, str]:
        """Collect field-level validation errors for a proposal.

        References are only checked against master data when they are new or
        changed, so an existing proposal whose source or destination was later
        deleted can still be saved.
        """
        errors: dict[str, str] = {}

        def changed(field: str) -> bool:
            return previous is None or getattr(previous, field) != getattr(proposal, field)

        source = None
        if proposal.source_id is None:
            errors["source_id"] = "a source / channel is required"
        else:
            source = self.db.get_source(proposal.source_id)
            if source is None and changed("source_id"):
                errors["source_id"] = f"source {proposal.source_id} not found"

        if not proposal.destination_ids:
            errors["destination_ids"] = "at least one destination is required"
        elif changed("destination_ids"):
            missing = [d for d in proposal.destination_ids if self.db.get_destination(d) is None]
            if missing:
                errors["destination_ids"] = (
                    f"unknown destination(s): {', '.join(str(d) for d in missing)}"
                )

        if source is not None and source.requires_agency and proposal.agency_id is None:
            errors["agency_id"] = f"an agency is required for source '{source.name}'"
        elif proposal.agency_id is not None and changed("agency_id"):
            if self.db.get_agency(proposal.agency_id) is None:
                errors["agency_id"] = f"agency {proposal.agency_id} not found"

        if proposal.sales_person_id is not None and changed("sales_person_id"):
            if self.db.get_user(proposal.sales_person_id) is None:
                errors["sales_person_id"] = f"user {proposal.sales_person_id} not found"

        return errors

    def _save(self, proposal: Proposal, previous: Optional[Proposal] = None) -> Proposal:
        errors = self.validate(proposal, previous)
        if errors:
            raise ValidationError(errors)

        currencies = proposal_currencies(proposal)
        if len(currencies) > 1:
            logger.warning(
                "Proposal %s mixes currencies %s; totals are summed without conversion",
                proposal.reference,
                ", ".join(currencies),
            )

        self.db.save_proposal(proposal)
        return proposal

    def _new_reference(self, created_at: datetime) -> str:
        # Vouchers outlive deleted proposals and their numbers embed the reference
        issued = {v.proposal_reference for v in self.db.list_vouchers()}
        for _ in range(REFERENCE_ATTEMPTS):
            reference = generate_reference(created_at, self.rng)
            if reference not in issued and self.db.get_proposal_by_reference(reference) is None:
                return reference
        raise ConflictError(f"Could not generate a unique proposal reference for {created_at.year}")

    def _require(self, proposal_id: str) -> Proposal:
        proposal = self.db.get_proposal(proposal_id)
        if proposal is None:
            raise NotFoundError(proposal_not_found(proposal_id))
        return proposal

    # CRUD

    def create_proposal(
        self,
        source_id: Optional[int],
        destination_ids: Iterable[int],
        agency_id: Optional[int] = None,
        sales_person_id: Optional[int] = None,
        overall_margin: str = DEFAULT_MARGIN,
        commission: str = DEFAULT_COMMISSION,
        estimated_nights: str = "",
        pdf_language: str = DEFAULT_PDF_LANGUAGE,
        display_currency: str = DEFAULT_DISPLAY_CURRENCY,
        line_items: Iterable[LineItem] = (),
    ) -> Proposal:
        """Create a new draft proposal.

        Args:
            source_id: Source / channel ID (required)
            destination_ids: Destination IDs (at least one)
            agency_id: Agency ID, required when the source is an agency channel
            sales_person_id: Optional user ID of the sales person
            overall_margin: Margin percentage
            commission: Commission percentage
            estimated_nights: Free-text estimate shown on the proposal
            pdf_language: Presentation language for documents
            display_currency: Presentation currency for documents
            line_items: Initial line items of any category

        Returns:
            The stored proposal

        Raises:
            ValidationError: If required fields are missing or references are unknown
        """
        created_at = datetime.now(UTC)
        proposal = Proposal(
            id=uuid4().hex,
            reference="",
            source_id=source_id,
            agency_id=agency_id,
            sales_person_id=sales_person_id,
            destination_ids=tuple(destination_ids),
            status=ProposalStatus.NEW,
            created_at=created_at,
            overall_margin=overall_margin,
            commission=commission,
            estimated_nights=estimated_nights,
            pdf_language=pdf_language,
            display_currency=display_currency,
        )
        for item in line_items:
            field = CATEGORY_FIELDS[item.category]
            proposal = replace(proposal, **{field: (*getattr(proposal, field), item)})

        # Validate before drawing a reference so a rejected form writes nothing
        errors = self.validate(proposal)
        if errors:
            raise ValidationError(errors)

        proposal = replace(proposal, reference=self._new_reference(created_at))
        self._save(proposal)
        logger.info("Created proposal %s (%s)", proposal.reference, proposal.id)
        return proposal

    def get_proposal(self, proposal_id: str) -> Optional[Proposal]:
        """Get proposal by ID.

        Returns:
            Proposal entity or None if not found
        """
        return self.db.get_proposal(proposal_id)

    def find_proposal(self, id_or_reference: str) -> Proposal:
        """Get a proposal by ID or reference.

        Raises:
            NotFoundError: If neither matches
        """
        proposal = self.db.get_proposal(id_or_reference)
        if proposal is None:
            proposal = self.db.get_proposal_by_reference(id_or_reference)
        if proposal is None:
            raise NotFoundError(proposal_not_found(id_or_reference))
        return proposal

    def list_proposals(
        self,
        search: Optional[str] = None,
        status: Optional[ProposalStatus] = None,
        source_id: Optional[int] = None,
    ) -> list[Proposal]:
        """List proposals, newest first.

        Args:
            search: Case-insensitive text matched against the reference and
                the names of the proposal's destinations
            status: Optional status filter
            source_id: Optional source filter

        Returns:
            Matching proposals
        """
        proposals = self.db.list_proposals(status=status, source_id=source_id)
        if not search:
            return proposals

        term = search.strip().lower()
        names = {d.id: d.name.lower() for d in self.db.list_destinations()}

        def matches(proposal: Proposal) -> bool:
            if term in proposal.reference.lower():
                return True
            destination_names = " ".join(names.get(d, "") for d in proposal.destination_ids)
            return term in destination_names

        return [p for p in proposals if matches(p)]

    def paginate(
        self, items: Sequence[Proposal], page: int, per_page: int = DEFAULT_PER_PAGE
    ) -> Page:
        """One page of a proposal listing, see :func:`paginate`."""
        return paginate(items, page, per_page)

    def save_proposal(self, proposal: Proposal) -> Proposal:
        """Validate and store a whole proposal, replacing any stored version.

        Raises:
            ValidationError: If required fields are missing or references are unknown
            LifecycleError: If the stored proposal is cancelled, the status
                changed, or line items changed on a proposal that is no longer NEW
        """
        previous = self.db.get_proposal(proposal.id)
        if previous is not None:
            ensure_not_cancelled(previous)
            if proposal.status != previous.status:
                raise LifecycleError(
                    f"Proposal {previous.reference} changes status only by confirming or cancelling"
                )
            if tuple(previous.all_items()) != tuple(proposal.all_items()):
                ensure_items_editable(previous)
        return self._save(proposal, previous)

    def update_proposal(self, proposal_id: str, **changes: Any) -> Proposal:
        """Update proposal header fields.

        Allowed in NEW and CONFIRMED status. Vouchers already issued are not
        touched.

        Raises:
            NotFoundError: If the proposal does not exist
            LifecycleError: If the proposal is cancelled
            ValidationError: If a field is not editable or validation fails
        """
        unknown = sorted(set(changes) - EDITABLE_FIELDS)
        if unknown:
            raise ValidationError({name: "field cannot be edited" for name in unknown})

        previous = self._require(proposal_id)
        ensure_not_cancelled(previous)
        if "destination_ids" in changes:
            changes["destination_ids"] = tuple(changes["destination_ids"])
        return self._save(replace(previous, **changes), previous)

    def delete_proposal(self, proposal_id: str) -> None:
        """Delete a proposal. Its vouchers are kept.

        Raises:
            NotFoundError: If the proposal does not exist
        """
        proposal = self._require(proposal_id)
        self.db.delete_proposal(proposal_id)
        logger.info("Deleted proposal %s", proposal.reference)

    # Line items

    def _edit_items(self, proposal_id: str, edit: Callable[[Proposal], Proposal]) -> Proposal:
        previous = self._require(proposal_id)
        ensure_items_editable(previous)
        return self._save(edit(previous), previous)

    def add_item(self, proposal_id: str, category: ServiceCategory, **values: Any) -> Proposal:
        """Append a line item to a draft proposal."""
        category = ServiceCategory(category)
        return self._edit_items(proposal_id, lambda p: add_line_item(p, category, **values))

    def update_item(
        self, proposal_id: str, category: ServiceCategory, item_id: str, **changes: Any
    ) -> Proposal:
        """Change fields of a line item of a draft proposal."""
        category = ServiceCategory(category)
        return self._edit_items(
            proposal_id, lambda p: update_line_item(p, category, item_id, **changes)
        )

    def remove_item(self, proposal_id: str, category: ServiceCategory, item_id: str) -> Proposal:
        """Remove a line item from a draft proposal."""
        category = ServiceCategory(category)
        return self._edit_items(proposal_id, lambda p: remove_line_item(p, category, item_id))

    def duplicate_item(
        self, proposal_id: str, category: ServiceCategory, item_id: str
    ) -> Proposal:
        """Copy a line item of a draft proposal under a fresh id."""
        category = ServiceCategory(category)
        return self._edit_items(proposal_id, lambda p: duplicate_line_item(p, category, item_id))

    # Lifecycle

    def confirm_proposal(self, proposal_id: str) -> tuple[Proposal, list[Voucher]]:
        """Confirm a draft proposal and issue one voucher per line item.

        Raises:
            NotFoundError: If the proposal does not exist
            LifecycleError: If the proposal is not NEW
        """
        confirmed = transition_proposal(self._require(proposal_id), ProposalStatus.CONFIRMED)
        vouchers = generate_vouchers(confirmed)
        self.db.confirm_proposal(confirmed, vouchers)
        logger.info(
            "Confirmed proposal %s, issued %d voucher(s)", confirmed.reference, len(vouchers)
        )
        return confirmed, vouchers

    def cancel_proposal(self, proposal_id: str) -> Proposal:
        """Cancel a NEW or CONFIRMED proposal.

        Raises:
            NotFoundError: If the proposal does not exist
            LifecycleError: If the proposal is already cancelled
        """
        cancelled = transition_proposal(self._require(proposal_id), ProposalStatus.CANCELLED)
        self.db.save_proposal(cancelled)
        logger.info("Cancelled proposal %s", cancelled.reference)
        return cancelled

    def duplicate(self, proposal_id: str) -> Proposal:
        """Store a new draft copy of a proposal with fresh identities."""
        source = self._require(proposal_id)
        now = datetime.now(UTC)
        copy = duplicate_proposal(source, self._new_reference(now), now)
        self.db.save_proposal(copy)
        logger.info("Duplicated proposal %s as %s", source.reference, copy.reference)
        return copy

    def _bulk(self, action: str, proposal_ids: Iterable[str], apply: Callable[[str], Any]) -> BulkResult:
        outcomes = []
        for proposal_id in proposal_ids:
            try:
                apply(proposal_id)
            except NotFoundError as e:
                outcomes.append(BulkOutcome(proposal_id, BulkOutcomeKind.FAILED, str(e)))
            except LifecycleError as e:
                outcomes.append(BulkOutcome(proposal_id, BulkOutcomeKind.SKIPPED, str(e)))
            except DomainError as e:
                outcomes.append(BulkOutcome(proposal_id, BulkOutcomeKind.FAILED, str(e)))
            else:
                outcomes.append(BulkOutcome(proposal_id, BulkOutcomeKind.APPLIED, action))

        result = BulkResult(action=action, outcomes=tuple(outcomes))
        logger.info(
            "Bulk %s: %d applied, %d skipped, %d failed",
            action,
            len(result.applied),
            len(result.skipped),
            len(result.failed),
        )
        return result

    def bulk_confirm(self, proposal_ids: Iterable[str]) -> BulkResult:
        """Confirm each proposal independently; ineligible ones are skipped."""
        return self._bulk("confirmed", proposal_ids, self.confirm_proposal)

    def bulk_cancel(self, proposal_ids: Iterable[str]) -> BulkResult:
        """Cancel each proposal independently; already cancelled ones are skipped."""
        return self._bulk("cancelled", proposal_ids, self.cancel_proposal)

    def bulk_delete(self, proposal_ids: Iterable[str]) -> BulkResult:
        """Delete each proposal independently."""
        return self._bulk("deleted", proposal_ids, self.delete_proposal)
