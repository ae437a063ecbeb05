"""Shared pytest fixtures for tourops tests."""

import os
import random
import tempfile
from datetime import datetime, UTC

import pytest

from tourops.database.factories import create_sqlite_database
from tourops.domain.company import CompanyService
from tourops.domain.entities import Proposal, ProposalStatus
from tourops.domain.master_data import (
    AgencyService,
    DestinationService,
    HotelService,
    LookupService,
    SourceService,
    UserService,
)
from tourops.domain.proposal import ProposalService
from tourops.domain.voucher import VoucherService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def destination_service(temp_db):
    return DestinationService(temp_db)


@pytest.fixture
def hotel_service(temp_db):
    return HotelService(temp_db)


@pytest.fixture
def agency_service(temp_db):
    return AgencyService(temp_db)


@pytest.fixture
def source_service(temp_db):
    return SourceService(temp_db)


@pytest.fixture
def user_service(temp_db):
    return UserService(temp_db)


@pytest.fixture
def lookup_service(temp_db):
    return LookupService(temp_db)


@pytest.fixture
def proposal_service(temp_db):
    """Create a ProposalService with a seeded reference generator."""
    return ProposalService(temp_db, rng=random.Random(1234))


@pytest.fixture
def voucher_service(temp_db):
    return VoucherService(temp_db)


@pytest.fixture
def company_service(temp_db):
    return CompanyService(temp_db)


@pytest.fixture
def master_data(
    destination_service, hotel_service, agency_service, source_service, user_service
):
    """Create a small set of master data and return the IDs by name."""
    istanbul = destination_service.create_destination("IST", "Istanbul", "Turkey")
    cappadocia = destination_service.create_destination("NAV", "Cappadocia", "Turkey")
    return {
        "istanbul": istanbul,
        "cappadocia": cappadocia,
        "hotel": hotel_service.create_hotel("Grand Bosphorus", istanbul, stars=5),
        "agency": agency_service.create_agency("Sunrise Travel", "Jordan", "10"),
        "direct": source_service.create_source("Direct (B2C)"),
        "b2b": source_service.create_source("Travel Agency (B2B)", requires_agency=True),
        "sales": user_service.create_user("Lina Haddad", "lina@example.com", "Sales"),
    }


@pytest.fixture
def draft_proposal(proposal_service, master_data):
    """A stored NEW proposal with one hotel and one flight."""
    proposal = proposal_service.create_proposal(
        source_id=master_data["direct"],
        destination_ids=[master_data["istanbul"]],
        sales_person_id=master_data["sales"],
    )
    proposal = proposal_service.add_item(
        proposal.id,
        "hotel",
        hotel_id=master_data["hotel"],
        checkin="2024-06-01",
        checkout="2024-06-04",
        num_rooms=2,
        price_per_night="100",
    )
    return proposal_service.add_item(proposal.id, "flight", pax=2, price_per_pax="250")


@pytest.fixture
def make_proposal():
    """Build an unsaved proposal for pure-function tests."""

    def _make(**overrides) -> Proposal:
        values = {
            "id": "p-1",
            "reference": "TOMS-2024-1000",
            "source_id": 1,
            "agency_id": None,
            "sales_person_id": None,
            "destination_ids": (1,),
            "status": ProposalStatus.NEW,
            "created_at": datetime(2024, 5, 1, tzinfo=UTC),
        }
        values.update(overrides)
        return Proposal(**values)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
