import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from booking_engine.booking.applications.create_booking import CreateBookingService
from booking_engine.booking.domain.enum import BookingStatus, FlightType, PassengerType
from booking_engine.booking.domain.exception import (
    OfferExpiredException,
    OrderCreationFailedException,
    PassengerValidationException,
)
from booking_engine.booking.domain.factory import BookingDetails, BookingFactory
from booking_engine.booking.domain.value_object import Contact
from booking_engine.shared.domain.exception import DuplicateResourceException
from booking_engine.shared.provider import ProviderError, RemoteOffer


@pytest.fixture
def remote_offer():
    return RemoteOffer.model_validate(
        {
            "id": "off_0001",
            "total_amount": "430.00",
            "total_currency": "USD",
            "expires_at": "2099-01-01T00:00:00Z",
            "passengers": [{"id": "pas_0001", "type": "adult"}],
            "payment_requirements": {"requires_instant_payment": False},
        }
    )


@pytest.fixture
def booking_details(create_passenger):
    def _factory(passengers=None) -> BookingDetails:
        return {
            "offer_id": "off_0001",
            "contact": Contact(email="traveller@example.com", phone="+8801712345678"),
            "passengers": passengers or [create_passenger()],
            "flight": {
                "airline": "Biman Bangladesh",
                "flight_number": "BG388",
                "route": "DAC ➝ DXB",
                "departure_date": "2025-04-10",
                "arrival_date": "2025-04-10",
                "duration": "5h 30m",
                "flight_type": FlightType.ONE_WAY,
            },
            "currency": "USD",
            "total_amount": Decimal("500.00"),
        }

    return _factory


@pytest.fixture
def service(mock_repository, mock_provider, cipher):
    def _factory(notifier=None) -> CreateBookingService:
        return CreateBookingService(
            repository=mock_repository,
            provider=mock_provider,
            factory=BookingFactory(cipher),
            notifier=notifier,
        )

    return _factory


class TestCreateBookingService:
    def test_create_holds_order_and_records_markup(
        self,
        service,
        booking_details,
        mock_repository,
        mock_provider,
        remote_offer,
        create_remote_order,
    ):
        """保留注文を作成し、markup = 500.00 - 430.00 を記録する"""
        # Arrange
        mock_provider.get_offer.return_value = remote_offer
        mock_provider.create_hold_order.return_value = create_remote_order()

        # Act
        result = asyncio.run(service().create(booking_details()))

        # Assert
        assert result.pnr == "RZPYBT"
        assert result.expiry is not None
        mock_repository.save.assert_called_once()
        booking = mock_repository.update.call_args[0][0]
        assert booking.status == BookingStatus.HELD
        assert booking.pricing.markup == Decimal("70.00")
        assert mock_repository.update.call_args.kwargs["expected_status"] == (
            BookingStatus.PROCESSING
        )

        offer_id, passengers = mock_provider.create_hold_order.call_args[0]
        assert offer_id == "off_0001"
        assert passengers[0]["id"] == "pas_0001"

    def test_invalid_passenger_mix_makes_no_remote_call(
        self, service, booking_details, create_passenger, mock_provider, mock_repository
    ):
        """幼児が大人より多い場合、プロバイダを呼ばずに拒否する"""
        # Arrange
        passengers = [create_passenger()] + [
            create_passenger(PassengerType.INFANT) for _ in range(2)
        ]

        # Act / Assert
        with pytest.raises(PassengerValidationException):
            asyncio.run(service().create(booking_details(passengers)))

        mock_provider.get_offer.assert_not_called()
        mock_provider.create_hold_order.assert_not_called()
        mock_repository.save.assert_not_called()

    def test_provider_failure_marks_booking_failed(
        self, service, booking_details, mock_provider, mock_repository, remote_offer
    ):
        # Arrange
        mock_provider.get_offer.return_value = remote_offer
        mock_provider.create_hold_order.side_effect = ProviderError(
            "Seat no longer available", status_code=422, code="unknown_error"
        )

        # Act / Assert
        with pytest.raises(OrderCreationFailedException):
            asyncio.run(service().create(booking_details()))

        booking = mock_repository.update.call_args[0][0]
        assert booking.status == BookingStatus.FAILED
        assert "Seat no longer available" in booking.admin_notes[-1]

    def test_offer_gone_at_order_time_maps_to_offer_expired(
        self, service, booking_details, mock_provider, mock_repository, remote_offer
    ):
        mock_provider.get_offer.return_value = remote_offer
        mock_provider.create_hold_order.side_effect = ProviderError(
            "Offer gone", status_code=422, code="offer_no_longer_available"
        )

        with pytest.raises(OfferExpiredException):
            asyncio.run(service().create(booking_details()))

        assert mock_repository.update.call_args[0][0].status == BookingStatus.FAILED

    def test_duplicate_reference_is_regenerated(
        self,
        service,
        booking_details,
        mock_provider,
        mock_repository,
        remote_offer,
        create_remote_order,
    ):
        """予約番号が重複した場合は再生成して保存する"""
        mock_provider.get_offer.return_value = remote_offer
        mock_provider.create_hold_order.return_value = create_remote_order()
        mock_repository.save.side_effect = [DuplicateResourceException(), None]

        asyncio.run(service().create(booking_details()))

        assert mock_repository.save.call_count == 2

    def test_duplicate_reference_gives_up_after_three_attempts(
        self, service, booking_details, mock_provider, mock_repository, remote_offer
    ):
        mock_provider.get_offer.return_value = remote_offer
        mock_repository.save.side_effect = DuplicateResourceException()

        with pytest.raises(DuplicateResourceException):
            asyncio.run(service().create(booking_details()))

        assert mock_repository.save.call_count == 3
        mock_provider.create_hold_order.assert_not_called()

    def test_notification_failure_does_not_fail_booking(
        self,
        service,
        booking_details,
        mock_provider,
        remote_offer,
        create_remote_order,
    ):
        """確認メールの送信失敗は予約結果に影響しない"""
        mock_provider.get_offer.return_value = remote_offer
        mock_provider.create_hold_order.return_value = create_remote_order()
        notifier = AsyncMock()
        notifier.send_booking_confirmation.side_effect = RuntimeError("SES down")

        result = asyncio.run(service(notifier).create(booking_details()))

        assert result.pnr == "RZPYBT"
        message = notifier.send_booking_confirmation.call_args[0][0]
        assert message.recipient == "traveller@example.com"
        assert message.reference == result.reference

