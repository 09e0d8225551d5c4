import pytest

from booking_engine.booking.applications.override_status import OverrideStatusService
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.exception import BookingNotFoundException
from booking_engine.booking.domain.value_object import BookingId
from booking_engine.shared.domain.exception import BusinessRuleViolationException


class TestOverrideStatusService:
    def test_override_updates_with_expected_status(
        self, mock_repository, create_booking
    ):
        # Arrange
        booking = create_booking(status=BookingStatus.HELD)
        mock_repository.find_by_id.return_value = booking
        service = OverrideStatusService(mock_repository)

        # Act
        result = service.override(
            BookingId(value="booking-123"), BookingStatus.CANCELLED, "Refund issued"
        )

        # Assert
        assert result.status == BookingStatus.CANCELLED
        mock_repository.update.assert_called_once_with(
            booking, expected_status=BookingStatus.HELD
        )

    def test_override_to_issued_without_documents_is_rejected(
        self, mock_repository, create_booking
    ):
        mock_repository.find_by_id.return_value = create_booking()
        service = OverrideStatusService(mock_repository)

        with pytest.raises(BusinessRuleViolationException):
            service.override(
                BookingId(value="booking-123"), BookingStatus.ISSUED, "Paid offline"
            )

        mock_repository.update.assert_not_called()

    def test_unknown_booking_raises(self, mock_repository):
        mock_repository.find_by_id.return_value = None
        service = OverrideStatusService(mock_repository)

        with pytest.raises(BookingNotFoundException):
            service.override(
                BookingId(value="missing"), BookingStatus.CANCELLED, "note"
            )
