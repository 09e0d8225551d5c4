from datetime import date
from decimal import Decimal
from typing import NotRequired, TypedDict

from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import BookingStatus, FlightType
from booking_engine.booking.domain.value_object import (
    BillingAddress,
    BookingId,
    BookingReference,
    Contact,
    FlightDetails,
    Passenger,
    PaymentInfo,
    Pricing,
)
from booking_engine.shared.domain.value_object import Currency
from booking_engine.shared.utils.card_cipher import CardCipher


class FlightSummary(TypedDict):
    """フライト概要の入力データ構造"""

    airline: str
    flight_number: str
    route: str
    departure_date: str
    arrival_date: str
    duration: str
    flight_type: FlightType
    logo_url: NotRequired[str | None]


class CardInput(TypedDict):
    """カード情報の入力データ構造（平文はこの層で暗号化する）"""

    card_name: str
    card_number: str
    expiry_date: str
    billing_address: BillingAddress


class BookingDetails(TypedDict):
    """予約作成の入力データ構造（TypedDict）"""

    offer_id: str
    contact: Contact
    passengers: list[Passenger]
    flight: FlightSummary
    currency: str
    total_amount: Decimal
    card: NotRequired[CardInput | None]


class BookingFactory:
    """予約ファクトリ"""

    def __init__(self, cipher: CardCipher, reference_prefix: str = "FB") -> None:
        self._cipher = cipher
        self._reference_prefix = reference_prefix

    def new_reference(self, today: date | None = None) -> BookingReference:
        return BookingReference.generate(self._reference_prefix, today)

    def create(
        self, details: BookingDetails, reference: BookingReference | None = None
    ) -> Booking:
        """processing 状態の新規予約を生成する"""
        flight = details["flight"]

        return Booking(
            id=BookingId.generate(),
            reference=reference or self.new_reference(),
            offer_id=details["offer_id"],
            contact=details["contact"],
            passengers=details["passengers"],
            flight_details=FlightDetails(
                airline=flight["airline"],
                flight_number=flight["flight_number"],
                route=flight["route"],
                departure_date=flight["departure_date"],
                arrival_date=flight["arrival_date"],
                duration=flight["duration"],
                flight_type=flight["flight_type"],
                logo_url=flight.get("logo_url"),
            ),
            pricing=Pricing(
                currency=Currency(details["currency"]),
                total_amount=details["total_amount"],
            ),
            payment_info=self._to_payment_info(details.get("card")),
            status=BookingStatus.PROCESSING,
        )

    def _to_payment_info(self, card: CardInput | None) -> PaymentInfo | None:
        if not card:
            return None
        digits = "".join(ch for ch in card["card_number"] if ch.isdigit())
        return PaymentInfo(
            card_name=card["card_name"],
            card_number=self._cipher.encrypt(digits),
            expiry_date=card["expiry_date"],
            billing_address=card["billing_address"],
        )
