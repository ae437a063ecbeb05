"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Record failed required-field validation.

    ``field_errors`` maps a field name to a user-facing message so callers
    can report each problem next to the field it belongs to.
    """

    def __init__(self, field_errors: dict[str, str], message: Optional[str] = None):
        self.field_errors = dict(field_errors)
        if message is None:
            details = "; ".join(f"{field}: {error}" for field, error in self.field_errors.items())
            message = f"Validation failed ({details})"
        super().__init__(message)


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class LifecycleError(DomainError):
    """Invalid status transition or edit of a record in a frozen state."""


def proposal_not_found(proposal_id: str) -> str:
    """Return message for missing proposal."""
    return f"Proposal {proposal_id} not found"


def voucher_not_found(voucher_id: str) -> str:
    """Return message for missing voucher."""
    return f"Voucher {voucher_id} not found"


def line_item_not_found(category: str, item_id: str) -> str:
    """Return message for missing line item."""
    return f"No {category} entry with id {item_id}"


def guest_not_found(guest_id: str) -> str:
    """Return message for missing guest."""
    return f"Guest {guest_id} not found"


def record_not_found(kind: str, record_id: int) -> str:
    """Return message for missing master-data record."""
    return f"{kind} {record_id} not found"


def invalid_transition(kind: str, reference: str, current: str, target: str) -> str:
    """Return message for a rejected status transition."""
    if current == target:
        return f"{kind} {reference} is already {current}"
    return f"Cannot change {kind.lower()} {reference} from {current} to {target}"
