import json
from datetime import datetime, timedelta, timezone

from booking_engine.booking.applications.query_bookings import BookingPage
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.value_object import PaymentInfo
from booking_engine.booking.handlers.response_models import (
    ENCRYPTED_CARD_LABEL,
    mask_card,
    to_detail_response,
    to_list_response,
    to_status_response,
)


class TestMaskCard:
    def test_shows_last_four_digits(self, cipher, create_booking):
        booking = create_booking()

        assert mask_card(booking.payment_info, cipher) == "**** 4242"

    def test_undecryptable_card_uses_fixed_label(self, cipher):
        payment_info = PaymentInfo(
            card_name="R Uddin", card_number="zz:zz", expiry_date="08/28"
        )

        assert mask_card(payment_info, cipher) == ENCRYPTED_CARD_LABEL

    def test_no_card(self, cipher):
        assert mask_card(None, cipher) is None


class TestResponseBuilders:
    def test_list_response_reports_expired_and_pagination(
        self, cipher, create_booking
    ):
        """支払期限切れの held は expired として表示する"""
        booking = create_booking(
            payment_deadline=datetime.now(timezone.utc) - timedelta(hours=1)
        )
        page = BookingPage(bookings=[booking], total=21, page=1, limit=20)

        body = to_list_response(page, cipher)

        item = body["data"]["bookings"][0]
        assert item["status"] == "expired"
        assert item["stored_status"] == "held"
        assert item["card"] == "**** 4242"
        assert item["time_left_seconds"] == 0
        assert body["data"]["pagination"]["total_pages"] == 2

    def test_detail_response_never_exposes_card_or_passport(
        self, cipher, create_booking
    ):
        booking = create_booking()

        body = to_detail_response(booking, cipher)

        serialized = json.dumps(body)
        assert "4242424242424242" not in serialized
        assert booking.payment_info.card_number not in serialized
        assert body["data"]["contact_email"] == "traveller@example.com"
        assert body["data"]["passengers"][0]["given_name"] == "Rahim"

    def test_status_response_omits_payment_data(self, create_booking):
        booking = create_booking(status=BookingStatus.CANCELLED)

        body = to_status_response(booking)

        assert body["success"] is True
        assert body["data"]["status"] == "cancelled"
        assert "card" not in body["data"]
