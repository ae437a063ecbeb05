"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the JSON payloads used
for line items, voucher snapshots and guest lists.
"""

from dataclasses import asdict, fields

from tourops.domain import entities as domain
from tourops.domain.line_items import line_item_from_dict, line_item_to_dict
from tourops.database.models import (
    Agency as ORMAgency,
    CompanyProfile as ORMCompanyProfile,
    Destination as ORMDestination,
    Hotel as ORMHotel,
    LookupItem as ORMLookupItem,
    Proposal as ORMProposal,
    ProposalLineItem as ORMProposalLineItem,
    Source as ORMSource,
    User as ORMUser,
    Voucher as ORMVoucher,
)


def destination_to_domain(orm_destination: ORMDestination) -> domain.Destination:
    """Convert SQLAlchemy Destination model to domain Destination entity."""
    return domain.Destination(
        id=orm_destination.id,
        code=orm_destination.code,
        name=orm_destination.name,
        country=orm_destination.country,
        description=orm_destination.description,
        is_active=orm_destination.is_active,
        created_at=orm_destination.created_at,
    )


def hotel_to_domain(orm_hotel: ORMHotel) -> domain.Hotel:
    """Convert SQLAlchemy Hotel model to domain Hotel entity."""
    return domain.Hotel(
        id=orm_hotel.id,
        name=orm_hotel.name,
        destination_id=orm_hotel.destination_id,
        stars=orm_hotel.stars,
        address=orm_hotel.address,
        is_active=orm_hotel.is_active,
        created_at=orm_hotel.created_at,
    )


def agency_to_domain(orm_agency: ORMAgency) -> domain.Agency:
    """Convert SQLAlchemy Agency model to domain Agency entity."""
    return domain.Agency(
        id=orm_agency.id,
        name=orm_agency.name,
        country=orm_agency.country,
        contact_person=orm_agency.contact_person,
        contact_email=orm_agency.contact_email,
        contact_phone=orm_agency.contact_phone,
        commission_rate=orm_agency.commission_rate,
        is_active=orm_agency.is_active,
        created_at=orm_agency.created_at,
    )


def source_to_domain(orm_source: ORMSource) -> domain.Source:
    """Convert SQLAlchemy Source model to domain Source entity."""
    return domain.Source(
        id=orm_source.id,
        name=orm_source.name,
        description=orm_source.description,
        requires_agency=orm_source.requires_agency,
        is_active=orm_source.is_active,
        created_at=orm_source.created_at,
    )


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        email=orm_user.email,
        role=orm_user.role,
        is_active=orm_user.is_active,
        created_at=orm_user.created_at,
    )


def lookup_to_domain(orm_lookup: ORMLookupItem) -> domain.LookupItem:
    """Convert SQLAlchemy LookupItem model to domain LookupItem entity."""
    return domain.LookupItem(
        id=orm_lookup.id,
        kind=domain.LookupKind(orm_lookup.kind),
        name=orm_lookup.name,
        description=orm_lookup.description,
        created_at=orm_lookup.created_at,
    )


# Company profile columns share the entity's field names
_COMPANY_PROFILE_FIELDS = tuple(f.name for f in fields(domain.CompanyProfile))


def company_profile_to_domain(orm_profile: ORMCompanyProfile) -> domain.CompanyProfile:
    """Convert the SQLAlchemy company profile row to the domain entity."""
    return domain.CompanyProfile(
        **{name: getattr(orm_profile, name) for name in _COMPANY_PROFILE_FIELDS}
    )


def apply_company_profile_to_orm(
    profile: domain.CompanyProfile, orm_profile: ORMCompanyProfile
) -> None:
    """Copy every company profile field onto the ORM row."""
    for name in _COMPANY_PROFILE_FIELDS:
        setattr(orm_profile, name, getattr(profile, name))


def line_item_to_orm(
    item: domain.LineItem, proposal_id: str, position: int
) -> ORMProposalLineItem:
    """Convert a domain line item to its stored row."""
    payload = line_item_to_dict(item)
    payload.pop("id")
    return ORMProposalLineItem(
        id=item.id,
        proposal_id=proposal_id,
        category=item.category.value,
        position=position,
        payload=payload,
    )


def line_item_to_domain(orm_item: ORMProposalLineItem) -> domain.LineItem:
    """Convert a stored row back to a domain line item."""
    category = domain.ServiceCategory(orm_item.category)
    return line_item_from_dict(category, {**orm_item.payload, "id": orm_item.id})


def proposal_to_domain(orm_proposal: ORMProposal) -> domain.Proposal:
    """Convert SQLAlchemy Proposal model (with line items) to domain Proposal entity."""
    collections: dict[str, list[domain.LineItem]] = {
        name: [] for name in domain.CATEGORY_FIELDS.values()
    }
    for orm_item in orm_proposal.line_items:
        item = line_item_to_domain(orm_item)
        collections[domain.CATEGORY_FIELDS[item.category]].append(item)

    return domain.Proposal(
        id=orm_proposal.id,
        reference=orm_proposal.reference,
        source_id=orm_proposal.source_id,
        agency_id=orm_proposal.agency_id,
        sales_person_id=orm_proposal.sales_person_id,
        destination_ids=tuple(orm_proposal.destination_ids or ()),
        status=domain.ProposalStatus(orm_proposal.status),
        created_at=orm_proposal.created_at,
        overall_margin=orm_proposal.overall_margin,
        commission=orm_proposal.commission,
        estimated_nights=orm_proposal.estimated_nights,
        pdf_language=orm_proposal.pdf_language,
        display_currency=orm_proposal.display_currency,
        **{name: tuple(items) for name, items in collections.items()},
    )


def apply_proposal_to_orm(proposal: domain.Proposal, orm_proposal: ORMProposal) -> None:
    """Copy every proposal field onto an ORM row, replacing its line items."""
    orm_proposal.reference = proposal.reference
    orm_proposal.source_id = proposal.source_id
    orm_proposal.agency_id = proposal.agency_id
    orm_proposal.sales_person_id = proposal.sales_person_id
    orm_proposal.destination_ids = list(proposal.destination_ids)
    orm_proposal.status = proposal.status.value
    orm_proposal.overall_margin = proposal.overall_margin
    orm_proposal.commission = proposal.commission
    orm_proposal.estimated_nights = proposal.estimated_nights
    orm_proposal.pdf_language = proposal.pdf_language
    orm_proposal.display_currency = proposal.display_currency
    orm_proposal.created_at = proposal.created_at
    orm_proposal.line_items = [
        line_item_to_orm(item, proposal.id, position)
        for position, item in enumerate(proposal.all_items())
    ]


def guest_to_dict(guest: domain.Guest) -> dict:
    return asdict(guest)


def voucher_to_domain(orm_voucher: ORMVoucher) -> domain.Voucher:
    """Convert SQLAlchemy Voucher model to domain Voucher entity."""
    return domain.Voucher(
        id=orm_voucher.id,
        voucher_number=orm_voucher.voucher_number,
        proposal_id=orm_voucher.proposal_id,
        proposal_reference=orm_voucher.proposal_reference,
        line_item_id=orm_voucher.line_item_id,
        service_type=domain.ServiceCategory(orm_voucher.service_type),
        service_data=dict(orm_voucher.service_data),
        agency_id=orm_voucher.agency_id,
        sales_person_id=orm_voucher.sales_person_id,
        status=domain.VoucherStatus(orm_voucher.status),
        created_at=orm_voucher.created_at,
        guests=tuple(domain.Guest(**g) for g in (orm_voucher.guests or ())),
        notes=orm_voucher.notes or "",
    )


def apply_voucher_to_orm(voucher: domain.Voucher, orm_voucher: ORMVoucher) -> None:
    """Copy every voucher field onto an ORM row."""
    orm_voucher.voucher_number = voucher.voucher_number
    orm_voucher.proposal_id = voucher.proposal_id
    orm_voucher.proposal_reference = voucher.proposal_reference
    orm_voucher.line_item_id = voucher.line_item_id
    orm_voucher.service_type = voucher.service_type.value
    orm_voucher.service_data = dict(voucher.service_data)
    orm_voucher.agency_id = voucher.agency_id
    orm_voucher.sales_person_id = voucher.sales_person_id
    orm_voucher.status = voucher.status.value
    orm_voucher.guests = [guest_to_dict(g) for g in voucher.guests]
    orm_voucher.notes = voucher.notes
    orm_voucher.created_at = voucher.created_at
