from datetime import date
from decimal import Decimal

import pytest

from booking_engine.booking.domain.enum import FlightType
from booking_engine.booking.domain.value_object import (
    BookingReference,
    Contact,
    FlightDetails,
    Pricing,
    normalize_route,
)
from booking_engine.shared.domain.value_object import Currency


class TestBookingReference:
    def test_generate_uses_prefix_date_and_four_digits(self):
        reference = BookingReference.generate("FB", today=date(2025, 3, 14))

        assert BookingReference.PATTERN.match(reference.value)
        assert reference.value.startswith("FB-250314-")
        assert 1000 <= int(reference.value[-4:]) <= 9999

    @pytest.mark.parametrize("value", ["FB-2503-4821", "fb-250314-4821", "FB250314"])
    def test_invalid_reference_is_rejected(self, value):
        with pytest.raises(ValueError):
            BookingReference(value=value)


class TestRouteNormalization:
    def test_round_trip_single_leg_is_expanded(self):
        assert (
            normalize_route("DAC ➝ DXB", FlightType.ROUND_TRIP)
            == "DAC ➝ DXB | DXB ➝ DAC"
        )

    def test_round_trip_with_both_legs_is_kept(self):
        route = "DAC ➝ DXB | DXB ➝ DAC"

        assert normalize_route(route, FlightType.ROUND_TRIP) == route

    def test_one_way_route_is_kept(self):
        assert normalize_route("DAC ➝ DXB", FlightType.ONE_WAY) == "DAC ➝ DXB"

    def test_flight_details_normalizes_on_creation(self):
        flight = FlightDetails(
            airline="Biman Bangladesh",
            flight_number="BG388",
            route="DAC ➝ DXB",
            departure_date="2025-04-10",
            arrival_date="2025-04-17",
            duration="5h 30m",
            flight_type=FlightType.ROUND_TRIP,
        )

        assert flight.route == "DAC ➝ DXB | DXB ➝ DAC"


class TestPricing:
    def test_markup_is_total_minus_provider_amount(self):
        pricing = Pricing(currency=Currency.usd(), total_amount=Decimal("500.00"))

        updated = pricing.with_base_amount(Decimal("430.00"))

        assert updated.markup == Decimal("70.00")
        assert updated.base_amount == Decimal("430.00")
        assert pricing.markup == Decimal("0")

    def test_markup_is_rounded_half_up(self):
        pricing = Pricing(currency=Currency.usd(), total_amount=Decimal("100.005"))

        assert pricing.with_base_amount(Decimal("0")).markup == Decimal("100.01")


class TestContact:
    def test_email_is_lowercased(self):
        contact = Contact(email=" Traveller@Example.COM ", phone="+8801712345678")

        assert contact.email == "traveller@example.com"

    def test_invalid_email_is_rejected(self):
        with pytest.raises(ValueError):
            Contact(email="not-an-email", phone="+8801712345678")
