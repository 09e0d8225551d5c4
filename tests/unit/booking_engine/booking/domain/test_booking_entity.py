from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.event import (
    BookingStatusChanged,
    PaymentAttemptFailed,
)
from booking_engine.booking.domain.value_object import TicketDocument
from booking_engine.shared.domain.exception import (
    BusinessRuleViolationException,
    ValidationException,
)

TICKET = TicketDocument(
    unique_identifier="1234567890123",
    type="electronic_ticket",
    url="https://example.com/t.pdf",
)


class TestBookingHold:
    def test_hold_records_order_and_markup(self, create_booking, create_remote_order):
        """保留注文の実費から markup を確定する（500.00 - 430.00 = 70.00）"""
        # Arrange
        booking = create_booking(
            status=BookingStatus.PROCESSING, order_id=None, pnr=None
        )
        order = create_remote_order(total_amount="430.00")

        # Act
        booking.hold(order)

        # Assert
        assert booking.status == BookingStatus.HELD
        assert booking.order_id == "ord_0001"
        assert booking.pnr == "RZPYBT"
        assert booking.pricing.base_amount == Decimal("430.00")
        assert booking.pricing.markup == Decimal("70.00")
        assert booking.payment_deadline == datetime(
            2030, 1, 1, 12, 0, tzinfo=timezone.utc
        )

    def test_hold_requires_processing(self, create_booking, create_remote_order):
        booking = create_booking(status=BookingStatus.HELD)

        with pytest.raises(BusinessRuleViolationException):
            booking.hold(create_remote_order())

    def test_hold_records_status_changed_event(
        self, create_booking, create_remote_order
    ):
        booking = create_booking(status=BookingStatus.PROCESSING, order_id=None)

        booking.hold(create_remote_order())

        events = booking.pull_events()
        assert len(events) == 1
        assert isinstance(events[0], BookingStatusChanged)
        assert events[0].from_status == "processing"
        assert events[0].to_status == "held"
        assert booking.pull_events() == []


class TestBookingIssue:
    def test_issue_from_held(self, create_booking):
        booking = create_booking(retry_count=2)

        booking.issue([TICKET], pnr="NEWPNR", note="Ticket issued via balance")

        assert booking.status == BookingStatus.ISSUED
        assert booking.documents == [TICKET]
        assert booking.pnr == "NEWPNR"
        assert booking.retry_count == 0
        assert booking.admin_notes[-1].endswith("Ticket issued via balance")

    def test_issue_requires_documents(self, create_booking):
        booking = create_booking()

        with pytest.raises(BusinessRuleViolationException, match="documents"):
            booking.issue([])

    def test_issue_is_not_allowed_after_cancellation(self, create_booking):
        booking = create_booking(status=BookingStatus.CANCELLED)

        with pytest.raises(BusinessRuleViolationException):
            booking.issue([TICKET])

    def test_issue_on_issued_booking_only_updates_documents(self, create_booking):
        booking = create_booking(status=BookingStatus.ISSUED, documents=[TICKET])

        booking.issue([TICKET, TICKET])

        assert booking.status == BookingStatus.ISSUED
        assert len(booking.documents) == 2
        assert booking.pull_events() == []


class TestBookingCancel:
    def test_cancel_held_booking(self, create_booking):
        booking = create_booking()

        booking.cancel("Auto-Sync: Cancelled on provider")

        assert booking.status == BookingStatus.CANCELLED

    def test_cancel_is_idempotent(self, create_booking):
        booking = create_booking(status=BookingStatus.CANCELLED)

        booking.cancel("again")

        assert booking.admin_notes == []
        assert booking.pull_events() == []

    def test_issued_booking_cannot_be_cancelled(self, create_booking):
        booking = create_booking(status=BookingStatus.ISSUED, documents=[TICKET])

        with pytest.raises(BusinessRuleViolationException):
            booking.cancel()


class TestPaymentAttempts:
    def test_failure_increments_retry_count(self, create_booking):
        booking = create_booking()

        booking.record_payment_failure("Card declined")

        assert booking.retry_count == 1
        assert booking.status == BookingStatus.HELD
        assert booking.last_retry_at is not None
        assert "Payment attempt 1/3 failed: Card declined" in booking.admin_notes[-1]
        assert isinstance(booking.pull_events()[0], PaymentAttemptFailed)

    def test_retry_ceiling_is_three(self, create_booking):
        booking = create_booking(retry_count=2)

        booking.record_payment_failure("Card declined")

        assert booking.retry_count == 3
        assert booking.has_payment_attempts_left is False
        with pytest.raises(BusinessRuleViolationException):
            booking.record_payment_failure("Card declined")

    def test_retry_count_out_of_range_is_rejected(self, create_booking):
        with pytest.raises(BusinessRuleViolationException):
            create_booking(retry_count=4)


class TestEffectiveStatus:
    def test_held_past_deadline_is_reported_as_expired(self, create_booking):
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        booking = create_booking(payment_deadline=now - timedelta(minutes=1))

        assert booking.effective_status(now) == BookingStatus.EXPIRED
        assert booking.status == BookingStatus.HELD
        assert booking.time_left(now) == timedelta(0)

    def test_held_without_deadline_is_not_expired(self, create_booking):
        booking = create_booking(payment_deadline=None)

        assert booking.effective_status() == BookingStatus.HELD
        assert booking.time_left() is None

    def test_time_left_before_deadline(self, create_booking):
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)
        booking = create_booking(payment_deadline=now + timedelta(hours=2))

        assert booking.effective_status(now) == BookingStatus.HELD
        assert booking.time_left(now) == timedelta(hours=2)


class TestOverrideStatus:
    def test_override_appends_audit_note(self, create_booking):
        booking = create_booking()

        booking.override_status(BookingStatus.CANCELLED, "Customer called support")

        assert booking.status == BookingStatus.CANCELLED
        assert booking.admin_notes[-1].endswith(
            "Admin override: held -> cancelled: Customer called support"
        )

    def test_override_requires_note(self, create_booking):
        booking = create_booking()

        with pytest.raises(ValidationException):
            booking.override_status(BookingStatus.CANCELLED, "  ")

    def test_override_to_issued_requires_documents(self, create_booking):
        booking = create_booking()

        with pytest.raises(BusinessRuleViolationException):
            booking.override_status(BookingStatus.ISSUED, "Issued by phone")

    def test_override_can_reopen_terminal_booking(self, create_booking):
        booking = create_booking(status=BookingStatus.FAILED)

        booking.override_status(BookingStatus.HELD, "Order recovered manually")

        assert booking.status == BookingStatus.HELD


class TestAirlineChanges:
    def test_changes_and_cancellation_details_are_recorded(self, create_booking):
        booking = create_booking()

        booking.record_airline_change({"id": "oaic_1"})
        booking.record_cancellation({"refund_amount": "120.00"})

        assert booking.airline_initiated_changes == {
            "changes": [{"id": "oaic_1"}],
            "cancellation": {"refund_amount": "120.00"},
        }
