"""Company profile: the operator's own details shown on proposals and vouchers."""

import logging
import re
from dataclasses import fields, replace
from datetime import datetime, UTC
from typing import Any

from tourops.database.base import Database
from tourops.domain.entities import CompanyProfile
from tourops.domain.errors import ValidationError
from tourops.domain.master_data import EMAIL_PATTERN

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset(f.name for f in fields(CompanyProfile)) - {"updated_at"}
REQUIRED_FIELDS = ("name", "email", "phone")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")


def validate_profile(profile: CompanyProfile) -> dict[str, str]:
    """Collect field-level errors of a company profile."""
    errors = {
        name: "this field is required" for name in REQUIRED_FIELDS if not getattr(profile, name)
    }
    if "email" not in errors and not EMAIL_PATTERN.match(profile.email):
        errors["email"] = "invalid email address"
    if not CURRENCY_PATTERN.match(profile.currency):
        errors["currency"] = "must be a three-letter currency code such as USD"
    return errors


class CompanyService:
    """Service for reading and editing the single company profile."""

    def __init__(self, db: Database):
        self.db = db

    def get_profile(self) -> CompanyProfile:
        """The stored profile, or a blank one if none was saved yet."""
        return self.db.get_company_profile() or CompanyProfile()

    def update_profile(self, **changes: Any) -> CompanyProfile:
        """Change some profile fields and store the whole profile.

        Values are stripped and the currency is upper-cased. Fields not given
        keep their stored value.

        Raises:
            ValidationError: If a field is unknown, a required field is blank,
                or the email or currency is malformed
        """
        unknown = sorted(set(changes) - PROFILE_FIELDS)
        if unknown:
            raise ValidationError({name: "not a company profile field" for name in unknown})

        values = {name: (value or "").strip() for name, value in changes.items()}
        if "currency" in values:
            values["currency"] = values["currency"].upper()

        profile = replace(self.get_profile(), **values, updated_at=datetime.now(UTC))
        errors = validate_profile(profile)
        if errors:
            raise ValidationError(errors)

        self.db.save_company_profile(profile)
        logger.info("Updated company profile (%s)", ", ".join(sorted(values)) or "no changes")
        return profile
