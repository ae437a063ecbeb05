"""Voucher generation and the voucher domain service.

A voucher is issued per line item when its proposal is confirmed. It keeps a
snapshot of the line item (``service_data``) taken at that moment, so later
edits to the proposal never change a voucher that was already issued.
"""

import logging
from dataclasses import replace
from datetime import datetime, UTC
from typing import Any, Optional
from uuid import uuid4

from tourops.database.base import Database
from tourops.domain.entities import (
    Guest,
    Proposal,
    Voucher,
    VoucherStatus,
)
from tourops.domain.errors import (
    NotFoundError,
    LifecycleError,
    ValidationError,
    guest_not_found,
    voucher_not_found,
)
from tourops.domain.lifecycle import transition_voucher
from tourops.domain.line_items import new_item_id, snapshot_line_item
from tourops.utils.date_parser import normalize_date_field

logger = logging.getLogger(__name__)

GUEST_FIELDS = frozenset({"first_name", "last_name", "passport_number", "nationality", "birth_date"})


def voucher_number(reference: str, sequence: int) -> str:
    """Voucher number derived from the proposal reference, e.g. ``TOMS-2024-1234-V01``."""
    return f"{reference}-V{sequence:02d}"


def generate_vouchers(proposal: Proposal, now: Optional[datetime] = None) -> list[Voucher]:
    """Issue one voucher per line item of a proposal.

    Vouchers start in PENDING_PAYMENT with an empty guest list and are
    numbered in category order (hotels, transportation, flights, rent a car,
    additional services).
    """
    created_at = now or datetime.now(UTC)
    return [
        Voucher(
            id=uuid4().hex,
            voucher_number=voucher_number(proposal.reference, sequence),
            proposal_id=proposal.id,
            proposal_reference=proposal.reference,
            line_item_id=item.id,
            service_type=item.category,
            service_data=snapshot_line_item(item),
            agency_id=proposal.agency_id,
            sales_person_id=proposal.sales_person_id,
            status=VoucherStatus.PENDING_PAYMENT,
            created_at=created_at,
            guests=(),
        )
        for sequence, item in enumerate(proposal.all_items(), start=1)
    ]


def _guest_values(values: dict[str, Any]) -> dict[str, Any]:
    unknown = sorted(set(values) - GUEST_FIELDS)
    if unknown:
        raise ValidationError({name: "not a guest field" for name in unknown})
    if "birth_date" in values:
        values = {**values, "birth_date": normalize_date_field(values["birth_date"])}
    return values


class VoucherService:
    """Service for managing issued vouchers."""

    def __init__(self, db: Database):
        """Initialize voucher service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require(self, voucher_id: str) -> Voucher:
        voucher = self.db.get_voucher(voucher_id)
        if voucher is None:
            raise NotFoundError(voucher_not_found(voucher_id))
        return voucher

    def _save(self, voucher: Voucher) -> Voucher:
        self.db.save_voucher(voucher)
        return voucher

    def get_voucher(self, voucher_id: str) -> Optional[Voucher]:
        """Get voucher by ID.

        Returns:
            Voucher entity or None if not found
        """
        return self.db.get_voucher(voucher_id)

    def find_voucher(self, id_or_number: str) -> Voucher:
        """Get a voucher by ID or voucher number.

        Raises:
            NotFoundError: If neither matches
        """
        voucher = self.db.get_voucher(id_or_number)
        if voucher is not None:
            return voucher
        for candidate in self.db.list_vouchers():
            if candidate.voucher_number == id_or_number:
                return candidate
        raise NotFoundError(voucher_not_found(id_or_number))

    def list_vouchers(
        self,
        proposal_id: Optional[str] = None,
        status: Optional[VoucherStatus] = None,
    ) -> list[Voucher]:
        """List vouchers, optionally for one proposal and/or in one status."""
        return self.db.list_vouchers(proposal_id=proposal_id, status=status)

    def change_status(self, voucher_id: str, target: VoucherStatus) -> Voucher:
        """Move a voucher along PENDING_PAYMENT -> PAID -> COMPLETED, or cancel it.

        Raises:
            NotFoundError: If the voucher does not exist
            LifecycleError: If the transition is not allowed
        """
        voucher = transition_voucher(self._require(voucher_id), target)
        logger.info("Voucher %s is now %s", voucher.voucher_number, target.value)
        return self._save(voucher)

    def update_notes(self, voucher_id: str, notes: str) -> Voucher:
        """Replace the free-text notes of a voucher."""
        return self._save(replace(self._require(voucher_id), notes=notes))

    # Guests

    def _editable(self, voucher_id: str) -> Voucher:
        voucher = self._require(voucher_id)
        if voucher.status == VoucherStatus.CANCELLED:
            raise LifecycleError(
                f"Voucher {voucher.voucher_number} is CANCELLED; its guest list cannot be changed"
            )
        return voucher

    def _guest_index(self, voucher: Voucher, guest_id: str) -> int:
        for index, guest in enumerate(voucher.guests):
            if guest.id == guest_id:
                return index
        raise NotFoundError(guest_not_found(guest_id))

    def add_guest(self, voucher_id: str, **values: Any) -> Voucher:
        """Append a guest to a voucher's guest list."""
        values = _guest_values(values)
        voucher = self._editable(voucher_id)
        guest = Guest(id=new_item_id(), **values)
        return self._save(replace(voucher, guests=(*voucher.guests, guest)))

    def update_guest(self, voucher_id: str, guest_id: str, **changes: Any) -> Voucher:
        """Change fields of one guest."""
        changes = _guest_values(changes)
        voucher = self._editable(voucher_id)
        index = self._guest_index(voucher, guest_id)
        guests = list(voucher.guests)
        guests[index] = replace(guests[index], **changes)
        return self._save(replace(voucher, guests=tuple(guests)))

    def remove_guest(self, voucher_id: str, guest_id: str) -> Voucher:
        """Remove one guest from a voucher."""
        voucher = self._editable(voucher_id)
        self._guest_index(voucher, guest_id)
        guests = tuple(g for g in voucher.guests if g.id != guest_id)
        return self._save(replace(voucher, guests=guests))

    def duplicate_guest(self, voucher_id: str, guest_id: str) -> Voucher:
        """Append a copy of one guest under a fresh id."""
        voucher = self._editable(voucher_id)
        guest = voucher.guests[self._guest_index(voucher, guest_id)]
        return self._save(replace(voucher, guests=(*voucher.guests, replace(guest, id=new_item_id()))))
