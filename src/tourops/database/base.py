"""Abstract database interface.

From the pricing core's point of view persistence is a simple keyed
collection: create/read/update/delete by id, one call at a time, last write
wins.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from tourops.domain.entities import (
    Agency,
    CompanyProfile,
    Destination,
    Hotel,
    LookupItem,
    LookupKind,
    Proposal,
    ProposalStatus,
    Source,
    User,
    Voucher,
    VoucherStatus,
)


class Database(ABC):
    """Abstract database interface for tourops."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Destination operations
    @abstractmethod
    def create_destination(
        self,
        code: str,
        name: str,
        country: str,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> int:
        """Create a destination. Returns destination ID."""
        pass

    @abstractmethod
    def get_destination(self, destination_id: int) -> Optional[Destination]:
        """Get destination by ID."""
        pass

    @abstractmethod
    def list_destinations(self) -> list[Destination]:
        """List all destinations ordered by name."""
        pass

    @abstractmethod
    def update_destination(self, destination_id: int, **fields: Any) -> None:
        """Update destination fields (code, name, country, description, is_active)."""
        pass

    @abstractmethod
    def delete_destination(self, destination_id: int) -> None:
        """Delete a destination."""
        pass

    # Hotel operations
    @abstractmethod
    def create_hotel(
        self,
        name: str,
        destination_id: int,
        stars: Optional[int] = None,
        address: Optional[str] = None,
        is_active: bool = True,
    ) -> int:
        """Create a hotel. Returns hotel ID."""
        pass

    @abstractmethod
    def get_hotel(self, hotel_id: int) -> Optional[Hotel]:
        """Get hotel by ID."""
        pass

    @abstractmethod
    def list_hotels(self, destination_id: Optional[int] = None) -> list[Hotel]:
        """List hotels, optionally filtered by destination."""
        pass

    @abstractmethod
    def update_hotel(self, hotel_id: int, **fields: Any) -> None:
        """Update hotel fields (name, destination_id, stars, address, is_active)."""
        pass

    @abstractmethod
    def delete_hotel(self, hotel_id: int) -> None:
        """Delete a hotel."""
        pass

    # Agency operations
    @abstractmethod
    def create_agency(
        self,
        name: str,
        country: str,
        commission_rate: str,
        contact_person: Optional[str] = None,
        contact_email: Optional[str] = None,
        contact_phone: Optional[str] = None,
        is_active: bool = True,
    ) -> int:
        """Create an agency. Returns agency ID."""
        pass

    @abstractmethod
    def get_agency(self, agency_id: int) -> Optional[Agency]:
        """Get agency by ID."""
        pass

    @abstractmethod
    def list_agencies(self) -> list[Agency]:
        """List all agencies ordered by name."""
        pass

    @abstractmethod
    def update_agency(self, agency_id: int, **fields: Any) -> None:
        """Update agency fields."""
        pass

    @abstractmethod
    def delete_agency(self, agency_id: int) -> None:
        """Delete an agency."""
        pass

    # Source operations
    @abstractmethod
    def create_source(
        self,
        name: str,
        description: Optional[str] = None,
        requires_agency: bool = False,
        is_active: bool = True,
    ) -> int:
        """Create a source channel. Returns source ID."""
        pass

    @abstractmethod
    def get_source(self, source_id: int) -> Optional[Source]:
        """Get source by ID."""
        pass

    @abstractmethod
    def list_sources(self) -> list[Source]:
        """List all sources ordered by name."""
        pass

    @abstractmethod
    def update_source(self, source_id: int, **fields: Any) -> None:
        """Update source fields."""
        pass

    @abstractmethod
    def delete_source(self, source_id: int) -> None:
        """Delete a source."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, name: str, email: str, role: str, is_active: bool = True) -> int:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users ordered by name."""
        pass

    @abstractmethod
    def update_user(self, user_id: int, **fields: Any) -> None:
        """Update user fields."""
        pass

    @abstractmethod
    def delete_user(self, user_id: int) -> None:
        """Delete a user."""
        pass

    # Lookup operations
    @abstractmethod
    def create_lookup(self, kind: LookupKind, name: str, description: Optional[str] = None) -> int:
        """Create a lookup item. Returns lookup item ID."""
        pass

    @abstractmethod
    def get_lookup(self, lookup_id: int) -> Optional[LookupItem]:
        """Get lookup item by ID."""
        pass

    @abstractmethod
    def list_lookups(self, kind: Optional[LookupKind] = None) -> list[LookupItem]:
        """List lookup items, optionally filtered by kind."""
        pass

    @abstractmethod
    def update_lookup(self, lookup_id: int, **fields: Any) -> None:
        """Update lookup item fields (name, description)."""
        pass

    @abstractmethod
    def delete_lookup(self, lookup_id: int) -> None:
        """Delete a lookup item."""
        pass

    # Company profile operations
    @abstractmethod
    def get_company_profile(self) -> Optional[CompanyProfile]:
        """Get the company profile, or None if it was never saved."""
        pass

    @abstractmethod
    def save_company_profile(self, profile: CompanyProfile) -> None:
        """Insert or wholly replace the single company profile."""
        pass

    # Proposal operations
    @abstractmethod
    def save_proposal(self, proposal: Proposal) -> None:
        """Insert or wholly replace a proposal and its line items."""
        pass

    @abstractmethod
    def confirm_proposal(self, proposal: Proposal, vouchers: list[Voucher]) -> None:
        """Store a confirmed proposal and its vouchers in one transaction.

        Either everything is written or nothing is.
        """
        pass

    @abstractmethod
    def get_proposal(self, proposal_id: str) -> Optional[Proposal]:
        """Get proposal by ID."""
        pass

    @abstractmethod
    def get_proposal_by_reference(self, reference: str) -> Optional[Proposal]:
        """Get proposal by its human-readable reference."""
        pass

    @abstractmethod
    def list_proposals(
        self,
        status: Optional[ProposalStatus] = None,
        source_id: Optional[int] = None,
    ) -> list[Proposal]:
        """List proposals, newest first, with optional filters."""
        pass

    @abstractmethod
    def delete_proposal(self, proposal_id: str) -> None:
        """Delete a proposal and its line items. Issued vouchers are kept."""
        pass

    # Voucher operations
    @abstractmethod
    def save_voucher(self, voucher: Voucher) -> None:
        """Insert or wholly replace a voucher."""
        pass

    @abstractmethod
    def get_voucher(self, voucher_id: str) -> Optional[Voucher]:
        """Get voucher by ID."""
        pass

    @abstractmethod
    def list_vouchers(
        self,
        proposal_id: Optional[str] = None,
        status: Optional[VoucherStatus] = None,
    ) -> list[Voucher]:
        """List vouchers with optional filters."""
        pass

    @abstractmethod
    def count_proposals_referencing(self, kind: str, record_id: int) -> int:
        """Count proposals referencing a master-data record.

        ``kind`` is one of "destination", "source", "agency" or "user".
        """
        pass
