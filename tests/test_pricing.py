"""Tests for the line-item pricing engine."""

from dataclasses import replace
from decimal import Decimal

import pytest

from tourops.domain.entities import (
    AdditionalServiceEntry,
    FlightEntry,
    HotelEntry,
    RentACarEntry,
    ServiceCategory,
    TransportationEntry,
)
from tourops.domain.pricing import (
    compute_line_total,
    compute_sell_price,
    hotel_nights,
    quantity_factors,
    unit_price,
    unit_price_field,
)


class TestHotelPricing:
    """Tests for hotel entries."""

    def test_three_nights_two_rooms(self):
        """Test the 3 nights x 2 rooms x 100 example."""
        item = HotelEntry(
            id="h1", checkin="2024-06-01", checkout="2024-06-04", num_rooms=2, price_per_night="100"
        )
        assert hotel_nights(item.checkin, item.checkout) == 3
        assert compute_line_total(item) == Decimal("600")

    def test_checkout_before_checkin_costs_nothing(self):
        """Test that zero nights give a zero total."""
        item = HotelEntry(
            id="h1", checkin="2024-06-04", checkout="2024-06-01", num_rooms=2, price_per_night="100"
        )
        assert hotel_nights(item.checkin, item.checkout) == 0
        assert compute_line_total(item) == Decimal("0")

    def test_missing_dates_cost_nothing(self):
        """Test that blank dates mean zero nights."""
        item = HotelEntry(id="h1", price_per_night="100")
        assert compute_line_total(item) == Decimal("0")

    def test_changing_checkout_recomputes_total(self):
        """Test that the total follows the dates without storing nights."""
        item = HotelEntry(
            id="h1", checkin="2024-06-01", checkout="2024-06-04", num_rooms=1, price_per_night="80"
        )
        longer = replace(item, checkout="2024-06-08")
        assert compute_line_total(item) == Decimal("240")
        assert compute_line_total(longer) == Decimal("560")

    def test_blank_rooms_count_as_one(self):
        """Test that a blank room count does not zero the total."""
        item = HotelEntry(
            id="h1", checkin="2024-06-01", checkout="2024-06-03", num_rooms="", price_per_night="50"
        )
        assert compute_line_total(item) == Decimal("100")


def test_transportation_total():
    """Test days x vehicles x price per day."""
    item = TransportationEntry(id="t1", num_days=3, num_vehicles=2, price_per_day="40")
    assert compute_line_total(item) == Decimal("240")


def test_transportation_missing_vehicles_counts_as_one():
    """Test that an absent optional multiplier counts as one."""
    item = TransportationEntry(id="t1", num_days=3, num_vehicles=None, price_per_day="40")
    assert compute_line_total(item) == Decimal("120")


def test_flight_total():
    """Test pax x price per pax."""
    item = FlightEntry(id="f1", pax=4, price_per_pax="250.50")
    assert compute_line_total(item) == Decimal("1002.00")


def test_flight_with_empty_price_is_zero():
    """Test that an empty price gives a zero total rather than an error."""
    item = FlightEntry(id="f1", pax=4, price_per_pax="")
    assert compute_line_total(item) == Decimal("0")


def test_rent_a_car_total():
    """Test days x price per day."""
    item = RentACarEntry(id="r1", num_days=5, price_per_day="35")
    assert compute_line_total(item) == Decimal("175")


def test_additional_service_total():
    """Test days x people x price per day."""
    item = AdditionalServiceEntry(id="a1", num_days=2, num_people=3, price_per_day="15")
    assert compute_line_total(item) == Decimal("90")


def test_exponent_input_prices_as_blank():
    """Test exponent-notation quantities and prices fall back like blank fields."""
    item = FlightEntry(id="f1", pax="1e999999999", price_per_pax="250")
    assert compute_line_total(item) == Decimal("250")

    item = RentACarEntry(id="r1", num_days=3, price_per_day="9e999999999")
    assert compute_line_total(item) == Decimal("0")
    assert compute_sell_price(compute_line_total(item), "1e999999999", "5") == Decimal("0")


@pytest.mark.parametrize(
    "item",
    [
        HotelEntry(id="1", checkin="2024-01-01", checkout="2024-01-05", num_rooms=-3, price_per_night="-10"),
        TransportationEntry(id="2", num_days="x", num_vehicles=0, price_per_day="abc"),
        FlightEntry(id="3", pax="", price_per_pax="-1"),
        RentACarEntry(id="4", num_days=None, price_per_day="NaN"),
        AdditionalServiceEntry(id="5", num_days=0, num_people=-1, price_per_day="$20"),
    ],
)
def test_line_total_is_unit_price_times_factors(item):
    """Test the pricing contract for every category, including bad input."""
    total = compute_line_total(item)
    expected = unit_price(item)
    for factor in quantity_factors(item):
        expected *= factor
    assert total == expected
    assert total >= 0


def test_unit_price_field_per_category():
    """Test which field holds the unit price."""
    assert unit_price_field(ServiceCategory.HOTEL) == "price_per_night"
    assert unit_price_field(ServiceCategory.FLIGHT) == "price_per_pax"
    assert unit_price_field(ServiceCategory.RENT_A_CAR) == "price_per_day"


def test_compute_sell_price_adds_margin_and_commission():
    """Test margin and commission are added, not compounded."""
    assert compute_sell_price(Decimal("600"), "15", "5") == Decimal("720")


def test_compute_sell_price_unparsable_percentages():
    """Test that unparsable percentages count as zero."""
    assert compute_sell_price(Decimal("100"), "", "abc") == Decimal("100")
