"""SQLAlchemy models for tourops database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Destination(Base):
    """Destination model."""

    __tablename__ = "destinations"

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    country = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    hotels = relationship("Hotel", back_populates="destination")


class Hotel(Base):
    """Hotel model."""

    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    destination_id = Column(Integer, ForeignKey("destinations.id"), nullable=False)
    stars = Column(Integer, nullable=True)
    address = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    destination = relationship("Destination", back_populates="hotels")


class Agency(Base):
    """Travel agency model."""

    __tablename__ = "agencies"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    country = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    commission_rate = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Source(Base):
    """Acquisition channel model."""

    __tablename__ = "sources"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=True)
    requires_agency = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class User(Base):
    """Back-office user model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    role = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class LookupItem(Base):
    """Global lookup table entry."""

    __tablename__ = "lookup_items"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class CompanyProfile(Base):
    """Company profile model. Holds a single row with ``id`` 1."""

    __tablename__ = "company_profile"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, default="")
    address = Column(String, nullable=False, default="")
    city = Column(String, nullable=False, default="")
    country = Column(String, nullable=False, default="")
    postal_code = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, default="")
    website = Column(String, nullable=False, default="")
    tax_id = Column(String, nullable=False, default="")
    license_number = Column(String, nullable=False, default="")
    currency = Column(String, nullable=False, default="USD")
    updated_at = Column(DateTime, default=_utcnow, nullable=False)


class Proposal(Base):
    """Proposal model.

    Master-data references are plain integers rather than foreign keys:
    destinations, sources and agencies may be deleted after a proposal
    references them.
    """

    __tablename__ = "proposals"

    id = Column(String, primary_key=True)
    reference = Column(String, unique=True, nullable=False)
    source_id = Column(Integer, nullable=True)
    agency_id = Column(Integer, nullable=True)
    sales_person_id = Column(Integer, nullable=True)
    destination_ids = Column(JSON, nullable=False, default=list)
    status = Column(String, nullable=False)
    overall_margin = Column(String, nullable=False, default="")
    commission = Column(String, nullable=False, default="")
    estimated_nights = Column(String, nullable=False, default="")
    pdf_language = Column(String, nullable=False)
    display_currency = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False)

    # Relationships
    line_items = relationship(
        "ProposalLineItem",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="ProposalLineItem.position",
    )


class ProposalLineItem(Base):
    """One line item of a proposal, stored as a JSON payload per category."""

    __tablename__ = "proposal_line_items"

    id = Column(String, primary_key=True)
    proposal_id = Column(String, ForeignKey("proposals.id"), nullable=False)
    category = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    payload = Column(JSON, nullable=False)

    # Relationships
    proposal = relationship("Proposal", back_populates="line_items")


class Voucher(Base):
    """Voucher model. ``service_data`` is the frozen line item snapshot."""

    __tablename__ = "vouchers"

    id = Column(String, primary_key=True)
    voucher_number = Column(String, unique=True, nullable=False)
    proposal_id = Column(String, nullable=False, index=True)
    proposal_reference = Column(String, nullable=False)
    line_item_id = Column(String, nullable=False)
    service_type = Column(String, nullable=False)
    service_data = Column(JSON, nullable=False)
    agency_id = Column(Integer, nullable=True)
    sales_person_id = Column(Integer, nullable=True)
    status = Column(String, nullable=False)
    guests = Column(JSON, nullable=False, default=list)
    notes = Column(String, nullable=False, default="")
    created_at = Column(DateTime, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
