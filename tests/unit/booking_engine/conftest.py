from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import (
    BookingStatus,
    FlightType,
    Gender,
    PassengerType,
)
from booking_engine.booking.domain.value_object import (
    BillingAddress,
    BookingId,
    BookingReference,
    Contact,
    FlightDetails,
    Passenger,
    Passport,
    PaymentInfo,
    Pricing,
    TicketDocument,
)
from booking_engine.shared.domain.value_object import Currency
from booking_engine.shared.provider.models import RemoteOrder
from booking_engine.shared.utils.card_cipher import CardCipher

TEST_KEY = "0123456789abcdef0123456789abcdef"
TEST_CARD_NUMBER = "4242424242424242"


def _years_ago(years: int) -> date:
    today = datetime.now(timezone.utc).date()
    return date(today.year - years, 1, 1)


@pytest.fixture
def cipher():
    """テスト用の CardCipher フィクスチャ"""
    return CardCipher(TEST_KEY)


@pytest.fixture
def mock_repository():
    """リポジトリのモックフィクスチャ"""
    return MagicMock()


@pytest.fixture
def mock_provider():
    """OrderProvider のモックフィクスチャ（全メソッドが非同期）"""
    return AsyncMock()


@pytest.fixture
def create_passenger():
    """Passenger を生成する Factory fixture"""

    def _factory(
        type: PassengerType = PassengerType.ADULT,
        given_name: str = "Rahim",
        family_name: str = "Uddin",
        gender: Gender = Gender.MALE,
        born_on: date | None = None,
        remote_id: str | None = None,
        passport: Passport | None = None,
    ) -> Passenger:
        if born_on is None:
            born_on = {
                PassengerType.ADULT: _years_ago(35),
                PassengerType.CHILD: _years_ago(6),
                PassengerType.INFANT: datetime.now(timezone.utc).date()
                - timedelta(days=200),
            }[type]
        return Passenger(
            type=type,
            given_name=given_name,
            family_name=family_name,
            gender=gender,
            born_on=born_on,
            remote_id=remote_id,
            passport=passport,
        )

    return _factory


@pytest.fixture
def create_booking(create_passenger, cipher):
    """Booking を生成する Factory fixture（Factories as fixtures パターン）"""

    def _factory(
        status: BookingStatus = BookingStatus.HELD,
        booking_id: str = "booking-123",
        reference: str = "FB-250314-4821",
        order_id: str | None = "ord_0001",
        pnr: str | None = "RZPYBT",
        total_amount: Decimal = Decimal("500.00"),
        documents: list[TicketDocument] | None = None,
        retry_count: int = 0,
        payment_deadline: datetime | None = None,
        with_card: bool = True,
        passengers: list[Passenger] | None = None,
        flight_type: FlightType = FlightType.ONE_WAY,
    ) -> Booking:
        payment_info = None
        if with_card:
            payment_info = PaymentInfo(
                card_name="Rahim Uddin",
                card_number=cipher.encrypt(TEST_CARD_NUMBER),
                expiry_date="08/28",
                billing_address=BillingAddress(
                    street="House 12, Road 5",
                    city="Dhaka",
                    zip_code="1207",
                    country="BD",
                ),
            )
        return Booking(
            id=BookingId(value=booking_id),
            reference=BookingReference(value=reference),
            offer_id="off_0001",
            contact=Contact(email="traveller@example.com", phone="+8801712345678"),
            passengers=passengers or [create_passenger(remote_id="pas_0001")],
            flight_details=FlightDetails(
                airline="Biman Bangladesh",
                flight_number="BG388",
                route="DAC ➝ DXB",
                departure_date="2025-04-10",
                arrival_date="2025-04-10",
                duration="5h 30m",
                flight_type=flight_type,
            ),
            pricing=Pricing(currency=Currency("USD"), total_amount=total_amount),
            payment_info=payment_info,
            status=status,
            order_id=order_id,
            pnr=pnr,
            documents=documents,
            retry_count=retry_count,
            payment_deadline=payment_deadline,
        )

    return _factory


@pytest.fixture
def create_remote_order():
    """プロバイダ注文（RemoteOrder）を生成する Factory fixture"""

    def _factory(
        order_id: str = "ord_0001",
        booking_reference: str = "RZPYBT",
        total_amount: str = "430.00",
        documents: list[dict] | None = None,
        cancelled_at: str | None = None,
        cancellation: dict | None = None,
        awaiting_payment: bool = True,
        payment_required_by: str | None = "2030-01-01T12:00:00Z",
        airline_initiated_changes: list[dict] | None = None,
    ) -> RemoteOrder:
        return RemoteOrder.model_validate(
            {
                "id": order_id,
                "booking_reference": booking_reference,
                "total_amount": total_amount,
                "total_currency": "USD",
                "live_mode": False,
                "cancelled_at": cancelled_at,
                "cancellation": cancellation,
                "documents": documents,
                "payment_status": {
                    "awaiting_payment": awaiting_payment,
                    "payment_required_by": payment_required_by,
                    "price_guarantee_expires_at": None,
                },
                "airline_initiated_changes": airline_initiated_changes,
            }
        )

    return _factory


@pytest.fixture
def issued_documents():
    return [
        {
            "unique_identifier": "1234567890123",
            "type": "electronic_ticket",
            "url": "https://example.com/tickets/1234567890123.pdf",
        }
    ]
