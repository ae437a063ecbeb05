"""Master-data domain services.

Destinations, hotels, agencies, sources, users and global lookup tables.
Proposals only store the IDs of these records, so deleting one that is still
referenced is allowed; readers render the dangling reference as "Unknown".
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional

from tourops.database.base import Database
from tourops.domain.entities import (
    Agency,
    Destination,
    Hotel,
    LookupItem,
    LookupKind,
    Source,
    User,
)
from tourops.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    record_not_found,
)

logger = logging.getLogger(__name__)

USER_ROLES = ("Admin", "Sales", "Operations")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required(values: dict[str, Any], *names: str) -> dict[str, str]:
    return {name: "this field is required" for name in names if _blank(values.get(name))}


def _matches(search: Optional[str], *texts: Optional[str]) -> bool:
    if not search:
        return True
    term = search.strip().lower()
    return any(term in (text or "").lower() for text in texts)


class _MasterDataService(ABC):
    """Shared lookup, validation and deletion rules of the master-data services."""

    kind = "Record"
    reference_kind: Optional[str] = None

    def __init__(self, db: Database):
        """Initialize the service.

        Args:
            db: Database instance
        """
        self.db = db

    @abstractmethod
    def _fetch(self, record_id: int) -> Any:
        """Load one record, or None if it does not exist."""

    def _require(self, record_id: int) -> Any:
        record = self._fetch(record_id)
        if record is None:
            raise NotFoundError(record_not_found(self.kind, record_id))
        return record

    def _raise_if_invalid(self, errors: dict[str, str]) -> None:
        if errors:
            raise ValidationError(errors)

    def _warn_if_referenced(self, record: Any) -> None:
        if self.reference_kind is None:
            return
        count = self.db.count_proposals_referencing(self.reference_kind, record.id)
        if count:
            logger.warning(
                "Deleting %s '%s' still referenced by %d proposal(s)",
                self.kind.lower(),
                record.name,
                count,
            )

    def _bulk_deactivate(self, ids: Iterable[int], update: Callable[..., None]) -> int:
        count = 0
        for record_id in ids:
            if self._fetch(record_id) is None:
                logger.warning("Skipping unknown %s %s", self.kind.lower(), record_id)
                continue
            update(record_id, is_active=False)
            count += 1
        return count


class DestinationService(_MasterDataService):
    """Service for managing destinations."""

    kind = "Destination"
    reference_kind = "destination"

    def _fetch(self, record_id: int) -> Optional[Destination]:
        return self.db.get_destination(record_id)

    def _check_code(self, code: str, exclude_id: Optional[int] = None) -> None:
        for dest in self.db.list_destinations():
            if dest.id != exclude_id and dest.code.lower() == code.strip().lower():
                raise ConflictError(f"Destination with code '{code}' already exists")

    def create_destination(
        self,
        code: str,
        name: str,
        country: str,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> int:
        """Create a destination.

        Args:
            code: Short unique code (e.g. "IST")
            name: Destination name
            country: Country name
            description: Optional description
            is_active: Whether the destination can be chosen on new proposals

        Returns:
            Destination ID

        Raises:
            ValidationError: If code, name or country is missing
            ConflictError: If the code is already used
        """
        self._raise_if_invalid(_required(locals(), "code", "name", "country"))
        self._check_code(code)
        return self.db.create_destination(
            code=code.strip().upper(),
            name=name.strip(),
            country=country.strip(),
            description=description,
            is_active=is_active,
        )

    def get_destination(self, destination_id: int) -> Optional[Destination]:
        return self.db.get_destination(destination_id)

    def list_destinations(
        self, search: Optional[str] = None, active_only: bool = False
    ) -> list[Destination]:
        """List destinations matching name, code or country."""
        return [
            d
            for d in self.db.list_destinations()
            if (d.is_active or not active_only) and _matches(search, d.name, d.code, d.country)
        ]

    def update_destination(self, destination_id: int, **fields: Any) -> None:
        """Update destination fields.

        Raises:
            NotFoundError: If the destination does not exist
            ValidationError: If a required field is blanked
            ConflictError: If the new code is already used
        """
        self._require(destination_id)
        self._raise_if_invalid(_required(fields, *({"code", "name", "country"} & set(fields))))
        if "code" in fields:
            self._check_code(fields["code"], exclude_id=destination_id)
            fields["code"] = fields["code"].strip().upper()
        self.db.update_destination(destination_id, **fields)

    def delete_destination(self, destination_id: int) -> None:
        """Delete a destination.

        Raises:
            NotFoundError: If the destination does not exist
            DependencyError: If hotels are still linked to it
        """
        destination = self._require(destination_id)
        hotel_count = len(self.db.list_hotels(destination_id=destination_id))
        if hotel_count:
            raise DependencyError(
                f"Cannot delete destination '{destination.name}': it has {hotel_count} "
                f"hotel{'s' if hotel_count != 1 else ''}. Please reassign or delete them first."
            )
        self._warn_if_referenced(destination)
        self.db.delete_destination(destination_id)

    def bulk_deactivate(self, destination_ids: Iterable[int]) -> int:
        """Mark destinations inactive. Returns how many were updated."""
        return self._bulk_deactivate(destination_ids, self.db.update_destination)


class HotelService(_MasterDataService):
    """Service for managing hotels."""

    kind = "Hotel"

    def _fetch(self, record_id: int) -> Optional[Hotel]:
        return self.db.get_hotel(record_id)

    def _check_destination(self, destination_id: Optional[int]) -> dict[str, str]:
        if destination_id is None:
            return {"destination_id": "this field is required"}
        if self.db.get_destination(destination_id) is None:
            return {"destination_id": f"destination {destination_id} not found"}
        return {}

    def create_hotel(
        self,
        name: str,
        destination_id: Optional[int],
        stars: Optional[int] = None,
        address: Optional[str] = None,
        is_active: bool = True,
    ) -> int:
        """Create a hotel linked to an existing destination. Returns hotel ID."""
        errors = _required({"name": name}, "name")
        errors.update(self._check_destination(destination_id))
        if stars is not None and not 1 <= stars <= 5:
            errors["stars"] = "must be between 1 and 5"
        self._raise_if_invalid(errors)
        return self.db.create_hotel(
            name=name.strip(),
            destination_id=destination_id,
            stars=stars,
            address=address,
            is_active=is_active,
        )

    def get_hotel(self, hotel_id: int) -> Optional[Hotel]:
        return self.db.get_hotel(hotel_id)

    def list_hotels(
        self, destination_id: Optional[int] = None, search: Optional[str] = None
    ) -> list[Hotel]:
        return [
            h
            for h in self.db.list_hotels(destination_id=destination_id)
            if _matches(search, h.name, h.address)
        ]

    def update_hotel(self, hotel_id: int, **fields: Any) -> None:
        self._require(hotel_id)
        errors = _required(fields, *({"name"} & set(fields)))
        if "destination_id" in fields:
            errors.update(self._check_destination(fields["destination_id"]))
        self._raise_if_invalid(errors)
        self.db.update_hotel(hotel_id, **fields)

    def delete_hotel(self, hotel_id: int) -> None:
        self._require(hotel_id)
        self.db.delete_hotel(hotel_id)

    def bulk_deactivate(self, hotel_ids: Iterable[int]) -> int:
        return self._bulk_deactivate(hotel_ids, self.db.update_hotel)


class AgencyService(_MasterDataService):
    """Service for managing travel agencies."""

    kind = "Agency"
    reference_kind = "agency"

    def _fetch(self, record_id: int) -> Optional[Agency]:
        return self.db.get_agency(record_id)

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
        """Create an agency.

        Returns:
            Agency ID

        Raises:
            ValidationError: If name, country or commission rate is missing, or
                the contact email is malformed
        """
        errors = _required(locals(), "name", "country", "commission_rate")
        if contact_email and not EMAIL_PATTERN.match(contact_email):
            errors["contact_email"] = "invalid email address"
        self._raise_if_invalid(errors)
        return self.db.create_agency(
            name=name.strip(),
            country=country.strip(),
            commission_rate=commission_rate.strip(),
            contact_person=contact_person,
            contact_email=contact_email,
            contact_phone=contact_phone,
            is_active=is_active,
        )

    def get_agency(self, agency_id: int) -> Optional[Agency]:
        return self.db.get_agency(agency_id)

    def list_agencies(self, search: Optional[str] = None) -> list[Agency]:
        """List agencies matching name, country or contact person."""
        return [
            a
            for a in self.db.list_agencies()
            if _matches(search, a.name, a.country, a.contact_person)
        ]

    def update_agency(self, agency_id: int, **fields: Any) -> None:
        self._require(agency_id)
        errors = _required(fields, *({"name", "country", "commission_rate"} & set(fields)))
        email = fields.get("contact_email")
        if email and not EMAIL_PATTERN.match(email):
            errors["contact_email"] = "invalid email address"
        self._raise_if_invalid(errors)
        self.db.update_agency(agency_id, **fields)

    def delete_agency(self, agency_id: int) -> None:
        agency = self._require(agency_id)
        self._warn_if_referenced(agency)
        self.db.delete_agency(agency_id)

    def bulk_deactivate(self, agency_ids: Iterable[int]) -> int:
        return self._bulk_deactivate(agency_ids, self.db.update_agency)


class SourceService(_MasterDataService):
    """Service for managing acquisition channels."""

    kind = "Source"
    reference_kind = "source"

    def _fetch(self, record_id: int) -> Optional[Source]:
        return self.db.get_source(record_id)

    def _check_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        for source in self.db.list_sources():
            if source.id != exclude_id and source.name.lower() == name.strip().lower():
                raise ConflictError(f"Source with name '{name}' already exists")

    def create_source(
        self,
        name: str,
        description: Optional[str] = None,
        requires_agency: bool = False,
        is_active: bool = True,
    ) -> int:
        """Create a source channel.

        Args:
            name: Channel name (unique)
            description: Optional description
            requires_agency: True for B2B channels where proposals must name an agency
            is_active: Whether the channel can be chosen on new proposals

        Returns:
            Source ID
        """
        self._raise_if_invalid(_required({"name": name}, "name"))
        self._check_name(name)
        return self.db.create_source(
            name=name.strip(),
            description=description,
            requires_agency=requires_agency,
            is_active=is_active,
        )

    def get_source(self, source_id: int) -> Optional[Source]:
        return self.db.get_source(source_id)

    def list_sources(self, search: Optional[str] = None, active_only: bool = False) -> list[Source]:
        return [
            s
            for s in self.db.list_sources()
            if (s.is_active or not active_only) and _matches(search, s.name, s.description)
        ]

    def update_source(self, source_id: int, **fields: Any) -> None:
        self._require(source_id)
        self._raise_if_invalid(_required(fields, *({"name"} & set(fields))))
        if "name" in fields:
            self._check_name(fields["name"], exclude_id=source_id)
        self.db.update_source(source_id, **fields)

    def delete_source(self, source_id: int) -> None:
        source = self._require(source_id)
        self._warn_if_referenced(source)
        self.db.delete_source(source_id)

    def bulk_deactivate(self, source_ids: Iterable[int]) -> int:
        return self._bulk_deactivate(source_ids, self.db.update_source)


class UserService(_MasterDataService):
    """Service for managing back-office users."""

    kind = "User"
    reference_kind = "user"

    def _fetch(self, record_id: int) -> Optional[User]:
        return self.db.get_user(record_id)

    def _validate(self, values: dict[str, Any], names: Iterable[str]) -> None:
        errors = _required(values, *names)
        email = values.get("email")
        if "email" not in errors and email is not None and not EMAIL_PATTERN.match(email):
            errors["email"] = "invalid email address"
        role = values.get("role")
        if "role" not in errors and role is not None and role not in USER_ROLES:
            errors["role"] = f"must be one of {', '.join(USER_ROLES)}"
        self._raise_if_invalid(errors)

    def _check_email(self, email: str, exclude_id: Optional[int] = None) -> None:
        for user in self.db.list_users():
            if user.id != exclude_id and user.email.lower() == email.strip().lower():
                raise ConflictError(f"User with email '{email}' already exists")

    def create_user(self, name: str, email: str, role: str = "Sales", is_active: bool = True) -> int:
        """Create a user. Returns user ID."""
        self._validate({"name": name, "email": email, "role": role}, ("name", "email", "role"))
        self._check_email(email)
        return self.db.create_user(
            name=name.strip(), email=email.strip().lower(), role=role, is_active=is_active
        )

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get_user(user_id)

    def list_users(self, search: Optional[str] = None, role: Optional[str] = None) -> list[User]:
        return [
            u
            for u in self.db.list_users()
            if (role is None or u.role == role) and _matches(search, u.name, u.email)
        ]

    def update_user(self, user_id: int, **fields: Any) -> None:
        self._require(user_id)
        self._validate(fields, {"name", "email", "role"} & set(fields))
        if "email" in fields:
            self._check_email(fields["email"], exclude_id=user_id)
            fields["email"] = fields["email"].strip().lower()
        self.db.update_user(user_id, **fields)

    def delete_user(self, user_id: int) -> None:
        user = self._require(user_id)
        self._warn_if_referenced(user)
        self.db.delete_user(user_id)

    def bulk_deactivate(self, user_ids: Iterable[int]) -> int:
        return self._bulk_deactivate(user_ids, self.db.update_user)


class LookupService(_MasterDataService):
    """Service for the global lookup tables (service, vehicle, flight and car types)."""

    kind = "Lookup item"

    def _fetch(self, record_id: int) -> Optional[LookupItem]:
        return self.db.get_lookup(record_id)

    def create_item(self, kind: LookupKind, name: str, description: Optional[str] = None) -> int:
        self._raise_if_invalid(_required({"name": name}, "name"))
        kind = LookupKind(kind)
        for item in self.db.list_lookups(kind):
            if item.name.lower() == name.strip().lower():
                raise ConflictError(f"'{name}' already exists in {kind.value} lookups")
        return self.db.create_lookup(kind=kind, name=name.strip(), description=description)

    def list_items(self, kind: Optional[LookupKind] = None, search: Optional[str] = None) -> list[LookupItem]:
        return [i for i in self.db.list_lookups(kind) if _matches(search, i.name, i.description)]

    def update_item(self, lookup_id: int, **fields: Any) -> None:
        self._require(lookup_id)
        self._raise_if_invalid(_required(fields, *({"name"} & set(fields))))
        self.db.update_lookup(lookup_id, **fields)

    def delete_item(self, lookup_id: int) -> None:
        self._require(lookup_id)
        self.db.delete_lookup(lookup_id)
