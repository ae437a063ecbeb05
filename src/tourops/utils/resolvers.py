"""Utilities for resolving master-data references."""

from typing import Any, Callable, Iterable, Optional, TypeVar

UNKNOWN = "Unknown"

RecordT = TypeVar("RecordT")


def resolve_record(
    value: str | int,
    get_by_id: Callable[[int], Optional[RecordT]],
    list_all: Callable[[], Iterable[RecordT]],
    kind: str,
) -> RecordT:
    """Resolve a record by ID or by name.

    Args:
        value: Record name (str) or ID (int or string representation of int)
        get_by_id: Lookup function returning the record or None
        list_all: Function listing all candidate records (matched on ``name``)
        kind: Human readable record kind for error messages ("Destination")

    Returns:
        The matching record

    Raises:
        ValueError: If the record is not found
    """
    # If it's already an integer, use it as ID
    if isinstance(value, int):
        record = get_by_id(value)
        if record is None:
            raise ValueError(f"{kind} ID {value} not found")
        return record

    # Try to parse as integer (handles string IDs like "1")
    try:
        record_id = int(value)
    except (ValueError, TypeError):
        record_id = None

    if record_id is not None:
        record = get_by_id(record_id)
        if record is None:
            raise ValueError(f"{kind} ID {record_id} not found")
        return record

    # Try to find by name (case-insensitive)
    wanted = value.strip().lower()
    for record in list_all():
        if getattr(record, "name", "").lower() == wanted:
            return record

    raise ValueError(f"{kind} '{value}' not found")


def display_name(record: Any, default: str = UNKNOWN) -> str:
    """Name of a resolved record, or "Unknown" for a dangling reference."""
    if record is None:
        return default
    return getattr(record, "name", None) or default
