"""Construction and serialization of line items."""

from dataclasses import asdict, fields, replace
from typing import Any, Optional
from uuid import uuid4

from tourops.domain.entities import (
    HotelEntry,
    LINE_ITEM_TYPES,
    LineItem,
    ServiceCategory,
)
from tourops.domain.errors import ValidationError
from tourops.domain.pricing import compute_line_total, hotel_nights
from tourops.utils.date_parser import normalize_date_field
from tourops.utils.money import quantize_money

DATE_FIELDS = frozenset({"checkin", "checkout", "date"})


def new_item_id() -> str:
    """Fresh opaque line-item / guest identifier."""
    return uuid4().hex


def field_names(category: ServiceCategory) -> tuple[str, ...]:
    """Editable field names of a category (everything except ``id``)."""
    return tuple(f.name for f in fields(LINE_ITEM_TYPES[category]) if f.name != "id")


def _check_fields(category: ServiceCategory, values: dict[str, Any]) -> None:
    allowed = set(field_names(category))
    unknown = sorted(set(values) - allowed)
    if unknown:
        raise ValidationError(
            {name: f"not a {category.label} field" for name in unknown}
        )


def _normalize_dates(values: dict[str, Any]) -> dict[str, Any]:
    return {
        name: normalize_date_field(value) if name in DATE_FIELDS else value
        for name, value in values.items()
    }


def new_line_item(category: ServiceCategory, **values: Any) -> LineItem:
    """Create a line item with category defaults and a fresh id.

    Quantity fields default to 1, price fields to "" and currency to USD.
    Date fields are stored as ``YYYY-MM-DD``.

    Raises:
        ValidationError: If a value names a field the category does not have
    """
    _check_fields(category, values)
    return LINE_ITEM_TYPES[category](id=new_item_id(), **_normalize_dates(values))


def with_changes(item: LineItem, **changes: Any) -> LineItem:
    """Copy of a line item with some fields changed. The id cannot change."""
    if "id" in changes:
        raise ValidationError({"id": "line item ids cannot be changed"})
    _check_fields(item.category, changes)
    return replace(item, **_normalize_dates(changes))


def reidentified(item: LineItem) -> LineItem:
    """Copy of a line item carrying a fresh id."""
    return replace(item, id=new_item_id())


def line_item_to_dict(item: LineItem) -> dict[str, Any]:
    """Plain dict of a line item's stored fields (no derived values)."""
    return asdict(item)


def line_item_from_dict(category: ServiceCategory, data: dict[str, Any]) -> LineItem:
    """Rebuild a line item from stored data, ignoring keys the category does not know.

    Derived keys such as ``total_price`` and ``nights`` are dropped so they can
    never become a second source of truth.
    """
    item_type = LINE_ITEM_TYPES[category]
    known = {f.name for f in fields(item_type)}
    return item_type(**{k: v for k, v in data.items() if k in known})


def snapshot_line_item(item: LineItem) -> dict[str, Any]:
    """Line item fields plus its derived totals, as frozen into a voucher."""
    data = line_item_to_dict(item)
    data["category"] = item.category.value
    if isinstance(item, HotelEntry):
        data["nights"] = hotel_nights(item.checkin, item.checkout)
    data["total_price"] = str(quantize_money(compute_line_total(item)))
    return data


def find_item(items: tuple[LineItem, ...], item_id: str) -> Optional[int]:
    """Index of the item with the given id, or None."""
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return None
