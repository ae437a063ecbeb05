"""Line-item pricing engine.

Totals are a pure function of a line item's unit price and its quantity
fields. Nothing here raises on bad input: unparsable prices count as zero and
unparsable or non-positive quantities count as one.
"""

from decimal import Decimal
from typing import Any, Callable

from tourops.domain.entities import (
    AdditionalServiceEntry,
    FlightEntry,
    HotelEntry,
    LineItem,
    RentACarEntry,
    ServiceCategory,
    TransportationEntry,
)
from tourops.utils.date_parser import days_between
from tourops.utils.money import HUNDRED, parse_money, parse_percent, parse_quantity


def hotel_nights(checkin: Any, checkout: Any) -> int:
    """Nights between checkin and checkout, 0 if checkout is not after checkin."""
    return days_between(checkin, checkout)


def _hotel_factors(item: HotelEntry) -> tuple[int, ...]:
    # Nights may legitimately be zero, so it is not clamped like other quantities
    return (hotel_nights(item.checkin, item.checkout), parse_quantity(item.num_rooms))


def _transportation_factors(item: TransportationEntry) -> tuple[int, ...]:
    return (parse_quantity(item.num_days), parse_quantity(item.num_vehicles))


def _flight_factors(item: FlightEntry) -> tuple[int, ...]:
    return (parse_quantity(item.pax),)


def _rent_a_car_factors(item: RentACarEntry) -> tuple[int, ...]:
    return (parse_quantity(item.num_days),)


def _additional_factors(item: AdditionalServiceEntry) -> tuple[int, ...]:
    return (parse_quantity(item.num_days), parse_quantity(item.num_people))


_QUANTITY_FACTORS: dict[ServiceCategory, Callable[[Any], tuple[int, ...]]] = {
    ServiceCategory.HOTEL: _hotel_factors,
    ServiceCategory.TRANSPORTATION: _transportation_factors,
    ServiceCategory.FLIGHT: _flight_factors,
    ServiceCategory.RENT_A_CAR: _rent_a_car_factors,
    ServiceCategory.ADDITIONAL: _additional_factors,
}

_UNIT_PRICE_FIELDS: dict[ServiceCategory, str] = {
    ServiceCategory.HOTEL: "price_per_night",
    ServiceCategory.TRANSPORTATION: "price_per_day",
    ServiceCategory.FLIGHT: "price_per_pax",
    ServiceCategory.RENT_A_CAR: "price_per_day",
    ServiceCategory.ADDITIONAL: "price_per_day",
}


def unit_price_field(category: ServiceCategory) -> str:
    """Name of the unit price attribute for a category."""
    return _UNIT_PRICE_FIELDS[category]


def unit_price(item: LineItem) -> Decimal:
    """Parsed unit price of a line item (0 when blank or malformed)."""
    return parse_money(getattr(item, _UNIT_PRICE_FIELDS[item.category]))


def quantity_factors(item: LineItem) -> tuple[int, ...]:
    """Quantity multipliers of a line item, in the order they are applied.

    Hotel: (nights, rooms); Transportation: (days, vehicles); Flight: (pax,);
    RentACar: (days,); AdditionalService: (days, people).
    """
    return _QUANTITY_FACTORS[item.category](item)


def compute_line_total(item: LineItem) -> Decimal:
    """Total cost of a single line item.

    Args:
        item: Any line item

    Returns:
        unit price multiplied by every quantity factor of the item's category
    """
    total = unit_price(item)
    for factor in quantity_factors(item):
        total *= factor
    return total


def compute_sell_price(line_total: Decimal, overall_margin: Any, commission: Any) -> Decimal:
    """Client-facing price of a line total after margin and commission.

    Both percentages apply to the same net amount and are added, not
    compounded: ``line_total * (1 + (margin + commission) / 100)``.
    """
    markup = (parse_percent(overall_margin) + parse_percent(commission)) / HUNDRED
    return line_total * (1 + markup)
