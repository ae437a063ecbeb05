"""Domain model entities for tourops.

These are pure data classes representing business concepts, independent of
database schema. All entities are frozen: edits produce new instances and
collections are tuples, so a proposal is always updated by replacing whole
collections rather than mutating a shared list.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional


class ServiceCategory(str, Enum):
    """Line-item category of a proposal."""

    HOTEL = "hotel"
    TRANSPORTATION = "transportation"
    FLIGHT = "flight"
    RENT_A_CAR = "rentacar"
    ADDITIONAL = "additional"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    ServiceCategory.HOTEL: "Hotel",
    ServiceCategory.TRANSPORTATION: "Transportation",
    ServiceCategory.FLIGHT: "Flight",
    ServiceCategory.RENT_A_CAR: "Rent a Car",
    ServiceCategory.ADDITIONAL: "Additional Service",
}


class ProposalStatus(str, Enum):
    NEW = "NEW"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class VoucherStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class LookupKind(str, Enum):
    """Global lookup tables used by the itinerary builders."""

    SERVICE_TYPE = "service_type"
    VEHICLE_TYPE = "vehicle_type"
    FLIGHT_TYPE = "flight_type"
    CAR_TYPE = "car_type"


# Master data


@dataclass(frozen=True)
class Destination:
    """Destination domain entity."""

    id: int
    code: str
    name: str
    country: str
    description: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Hotel:
    """Hotel property linked to a destination."""

    id: int
    name: str
    destination_id: int
    stars: Optional[int]
    address: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Agency:
    """Travel agency (B2B channel partner)."""

    id: int
    name: str
    country: str
    contact_person: Optional[str]
    contact_email: Optional[str]
    contact_phone: Optional[str]
    commission_rate: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Source:
    """Acquisition channel. Agency channels require an agency on proposals."""

    id: int
    name: str
    description: Optional[str]
    requires_agency: bool
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class User:
    """Back-office user (sales person, operations, admin)."""

    id: int
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class LookupItem:
    """Entry of a global lookup table."""

    id: int
    kind: LookupKind
    name: str
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class CompanyProfile:
    """The operator's own details, printed on proposals and vouchers.

    There is exactly one profile; an unsaved one has every field blank and
    ``updated_at`` None.
    """

    name: str = ""
    address: str = ""
    city: str = ""
    country: str = ""
    postal_code: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    tax_id: str = ""
    license_number: str = ""
    currency: str = "USD"
    updated_at: Optional[datetime] = None


# Line items


@dataclass(frozen=True)
class LineItem:
    """Shared contract of every priced entry in a proposal.

    Unit prices are kept as entered (strings that may be blank); the total is
    never stored and is always derived by ``tourops.domain.pricing``.
    """

    category: ClassVar[ServiceCategory]

    id: str
    destination_id: Optional[int] = None
    currency: str = "USD"


@dataclass(frozen=True)
class HotelEntry(LineItem):
    category: ClassVar[ServiceCategory] = ServiceCategory.HOTEL

    hotel_id: Optional[int] = None
    checkin: str = ""
    checkout: str = ""
    room_type: str = ""
    board_type: str = ""
    num_rooms: int = 1
    price_per_night: str = ""


@dataclass(frozen=True)
class TransportationEntry(LineItem):
    category: ClassVar[ServiceCategory] = ServiceCategory.TRANSPORTATION

    date: str = ""
    description: str = ""
    vehicle_type: str = ""
    num_days: int = 1
    num_vehicles: Optional[int] = 1
    price_per_day: str = ""


@dataclass(frozen=True)
class FlightEntry(LineItem):
    category: ClassVar[ServiceCategory] = ServiceCategory.FLIGHT

    date: str = ""
    departure: str = ""
    arrival: str = ""
    departure_time: str = ""
    arrival_time: str = ""
    flight_type: str = ""
    pax: int = 1
    price_per_pax: str = ""


@dataclass(frozen=True)
class RentACarEntry(LineItem):
    category: ClassVar[ServiceCategory] = ServiceCategory.RENT_A_CAR

    date: str = ""
    car_type: str = ""
    pickup_location: str = ""
    dropoff_location: str = ""
    num_days: int = 1
    price_per_day: str = ""


@dataclass(frozen=True)
class AdditionalServiceEntry(LineItem):
    category: ClassVar[ServiceCategory] = ServiceCategory.ADDITIONAL

    date: str = ""
    description: str = ""
    service_type: str = ""
    num_days: int = 1
    num_people: Optional[int] = 1
    price_per_day: str = ""


LINE_ITEM_TYPES: dict[ServiceCategory, type[LineItem]] = {
    ServiceCategory.HOTEL: HotelEntry,
    ServiceCategory.TRANSPORTATION: TransportationEntry,
    ServiceCategory.FLIGHT: FlightEntry,
    ServiceCategory.RENT_A_CAR: RentACarEntry,
    ServiceCategory.ADDITIONAL: AdditionalServiceEntry,
}

# Proposal attribute holding each category's collection
CATEGORY_FIELDS: dict[ServiceCategory, str] = {
    ServiceCategory.HOTEL: "hotels",
    ServiceCategory.TRANSPORTATION: "transportation",
    ServiceCategory.FLIGHT: "flights",
    ServiceCategory.RENT_A_CAR: "rent_a_car",
    ServiceCategory.ADDITIONAL: "additional_services",
}


# Proposals and vouchers


@dataclass(frozen=True)
class Proposal:
    """Customer quotation aggregating line items across five categories."""

    id: str
    reference: str
    source_id: Optional[int]
    agency_id: Optional[int]
    sales_person_id: Optional[int]
    destination_ids: tuple[int, ...]
    status: ProposalStatus
    created_at: datetime
    hotels: tuple[HotelEntry, ...] = ()
    transportation: tuple[TransportationEntry, ...] = ()
    flights: tuple[FlightEntry, ...] = ()
    rent_a_car: tuple[RentACarEntry, ...] = ()
    additional_services: tuple[AdditionalServiceEntry, ...] = ()
    overall_margin: str = "15"
    commission: str = "5"
    estimated_nights: str = ""
    pdf_language: str = "arabic"
    display_currency: str = "usd"

    def items(self, category: ServiceCategory) -> tuple[LineItem, ...]:
        """Line items of one category, in entry order."""
        return getattr(self, CATEGORY_FIELDS[category])

    def all_items(self) -> Iterator[LineItem]:
        """Every line item, category by category."""
        for category in ServiceCategory:
            yield from self.items(category)


@dataclass(frozen=True)
class PricingBreakdown:
    """Derived proposal totals. Never persisted."""

    category_subtotals: dict[ServiceCategory, Decimal]
    subtotal: Decimal
    margin_amount: Decimal
    commission_amount: Decimal
    final_price: Decimal
    currencies: tuple[str, ...]

    @property
    def mixed_currencies(self) -> bool:
        return len(self.currencies) > 1


@dataclass(frozen=True)
class Guest:
    """Traveller listed on a voucher."""

    id: str
    first_name: str = ""
    last_name: str = ""
    passport_number: str = ""
    nationality: str = ""
    birth_date: str = ""


@dataclass(frozen=True)
class Voucher:
    """Service confirmation for a single line item of a confirmed proposal.

    ``service_data`` is a snapshot of the line item taken when the proposal
    was confirmed. Later proposal edits never change it.
    """

    id: str
    voucher_number: str
    proposal_id: str
    proposal_reference: str
    line_item_id: str
    service_type: ServiceCategory
    service_data: dict[str, Any]
    agency_id: Optional[int]
    sales_person_id: Optional[int]
    status: VoucherStatus
    created_at: datetime
    guests: tuple[Guest, ...] = ()
    notes: str = ""


class BulkOutcomeKind(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class BulkOutcome:
    """Result of applying a bulk action to one proposal."""

    proposal_id: str
    kind: BulkOutcomeKind
    message: str


@dataclass(frozen=True)
class BulkResult:
    """Per-proposal outcomes of a bulk action."""

    action: str
    outcomes: tuple[BulkOutcome, ...] = field(default_factory=tuple)

    def _ids(self, kind: BulkOutcomeKind) -> list[str]:
        return [o.proposal_id for o in self.outcomes if o.kind == kind]

    @property
    def applied(self) -> list[str]:
        return self._ids(BulkOutcomeKind.APPLIED)

    @property
    def skipped(self) -> list[str]:
        return self._ids(BulkOutcomeKind.SKIPPED)

    @property
    def failed(self) -> list[str]:
        return self._ids(BulkOutcomeKind.FAILED)


@dataclass(frozen=True)
class Page:
    """One page of a listing. ``number`` is 1-based."""

    items: tuple[Any, ...]
    number: int
    per_page: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.per_page)
