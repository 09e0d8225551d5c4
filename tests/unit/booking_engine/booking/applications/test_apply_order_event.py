from booking_engine.booking.applications.apply_order_event import (
    AIRLINE_CHANGE_DETECTED,
    CANCELLATION_CONFIRMED,
    ORDER_CREATED,
    PAYMENT_FAILED,
    TICKETS_ISSUED,
    ApplyOrderEventService,
)
from booking_engine.booking.domain.enum import BookingStatus


class TestApplyOrderEventService:
    def test_tickets_issued_event_issues_booking(
        self, mock_repository, create_booking, issued_documents
    ):
        # Arrange
        booking = create_booking(status=BookingStatus.HELD)
        mock_repository.find_by_order_id.return_value = booking
        service = ApplyOrderEventService(mock_repository)

        # Act
        outcome = service.apply(
            TICKETS_ISSUED,
            {
                "object": {
                    "id": "ord_0001",
                    "booking_reference": "RZPYBT",
                    "documents": issued_documents,
                }
            },
        )

        # Assert
        assert outcome == "applied"
        assert booking.status == BookingStatus.ISSUED
        mock_repository.find_by_order_id.assert_called_once_with("ord_0001")
        mock_repository.update.assert_called_once_with(
            booking, expected_status=BookingStatus.HELD
        )

    def test_order_created_event_holds_processing_booking(
        self, mock_repository, create_booking
    ):
        booking = create_booking(status=BookingStatus.PROCESSING, order_id=None)
        mock_repository.find_by_order_id.return_value = booking
        service = ApplyOrderEventService(mock_repository)

        outcome = service.apply(
            ORDER_CREATED,
            {
                "id": "ord_0001",
                "booking_reference": "RZPYBT",
                "total_amount": "430.00",
                "total_currency": "USD",
            },
        )

        assert outcome == "applied"
        assert booking.status == BookingStatus.HELD
        assert booking.order_id == "ord_0001"

    def test_cancellation_event_records_refund(self, mock_repository, create_booking):
        booking = create_booking(status=BookingStatus.HELD)
        mock_repository.find_by_order_id.return_value = booking
        service = ApplyOrderEventService(mock_repository)

        service.apply(
            CANCELLATION_CONFIRMED,
            {"object": {"order_id": "ord_0001", "refund_amount": "120.00"}},
        )

        assert booking.status == BookingStatus.CANCELLED
        assert booking.airline_initiated_changes["cancellation"] == {
            "refund_amount": "120.00"
        }

    def test_payment_failed_event_only_adds_note(
        self, mock_repository, create_booking
    ):
        booking = create_booking(status=BookingStatus.HELD)
        mock_repository.find_by_order_id.return_value = booking
        service = ApplyOrderEventService(mock_repository)

        service.apply(
            PAYMENT_FAILED, {"order_id": "ord_0001", "error_message": "Declined"}
        )

        assert booking.status == BookingStatus.HELD
        assert booking.retry_count == 0
        assert booking.admin_notes[-1].endswith("Reason: Declined")

    def test_airline_change_is_recorded(self, mock_repository, create_booking):
        booking = create_booking()
        mock_repository.find_by_order_id.return_value = booking
        service = ApplyOrderEventService(mock_repository)

        service.apply(AIRLINE_CHANGE_DETECTED, {"id": "oaic_1", "order_id": "ord_0001"})

        assert booking.airline_initiated_changes["changes"] == [
            {"id": "oaic_1", "order_id": "ord_0001"}
        ]

    def test_backward_transition_is_ignored(self, mock_repository, create_booking):
        """発券済み予約へのキャンセルイベントは適用しない"""
        booking = create_booking(status=BookingStatus.ISSUED)
        mock_repository.find_by_order_id.return_value = booking
        service = ApplyOrderEventService(mock_repository)

        outcome = service.apply(CANCELLATION_CONFIRMED, {"order_id": "ord_0001"})

        assert outcome == "ignored"
        assert booking.status == BookingStatus.ISSUED
        mock_repository.update.assert_not_called()

    def test_unknown_order_is_acknowledged(self, mock_repository):
        mock_repository.find_by_order_id.return_value = None
        service = ApplyOrderEventService(mock_repository)

        assert service.apply(TICKETS_ISSUED, {"id": "ord_9999"}) == "unknown_order"

    def test_unsupported_event_type_is_ignored(self, mock_repository):
        service = ApplyOrderEventService(mock_repository)

        assert service.apply("ping.triggered", {}) == "ignored"
        mock_repository.find_by_order_id.assert_not_called()
