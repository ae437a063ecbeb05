"""Domain layer for tourops application."""

_SERVICES = {
    "ProposalService": "tourops.domain.proposal",
    "VoucherService": "tourops.domain.voucher",
    "DestinationService": "tourops.domain.master_data",
    "HotelService": "tourops.domain.master_data",
    "AgencyService": "tourops.domain.master_data",
    "SourceService": "tourops.domain.master_data",
    "UserService": "tourops.domain.master_data",
    "LookupService": "tourops.domain.master_data",
    "CompanyService": "tourops.domain.company",
}

__all__ = list(_SERVICES)


# Import services lazily: tourops.database.base imports tourops.domain.entities,
# and the services import tourops.database.base
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
