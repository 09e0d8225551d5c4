import json
from unittest.mock import MagicMock

from pydantic import BaseModel, ValidationError

from booking_engine.booking.domain.exception import BookingNotFoundException
from booking_engine.payment.domain.exception import PaymentFailedException
from booking_engine.shared.domain.exception import TooManyRequestsException
from booking_engine.shared.utils.http_response import (
    INTERNAL_ERROR_MESSAGE,
    api_response,
    handle_exception,
)


class _Sample(BaseModel):
    cvv: int


def _body(response: dict) -> dict:
    return json.loads(response["body"])


class TestHandleException:
    def test_domain_exception_uses_its_status_and_code(self):
        response = handle_exception(BookingNotFoundException(), MagicMock())

        assert response["statusCode"] == 404
        assert _body(response) == {
            "success": False,
            "message": "Booking not found",
            "code": "BOOKING_NOT_FOUND",
        }

    def test_rate_limit_maps_to_429(self):
        response = handle_exception(TooManyRequestsException(), MagicMock())

        assert response["statusCode"] == 429
        assert _body(response)["code"] == "TOO_MANY_REQUESTS"

    def test_exhausted_payment_failure_reports_attempts_and_support(self):
        """最後の決済失敗では残り回数 0 とサポート案内を返す"""
        response = handle_exception(
            PaymentFailedException("Payment failed: declined", attempts_left=0),
            MagicMock(),
        )

        assert response["statusCode"] == 402
        assert _body(response) == {
            "success": False,
            "message": (
                "Payment failed: declined. "
                "Maximum retry limit reached. Please contact support."
            ),
            "code": "PAYMENT_FAILED",
            "attempts_left": 0,
        }

    def test_retryable_payment_failure_reports_attempts_left(self):
        response = handle_exception(
            PaymentFailedException("Payment failed: declined", attempts_left=2),
            MagicMock(),
        )

        body = _body(response)
        assert body["message"] == "Payment failed: declined"
        assert body["attempts_left"] == 2

    def test_validation_error_maps_to_400_with_field_location(self):
        try:
            _Sample.model_validate({"cvv": "abc"})
        except ValidationError as e:
            error = e

        response = handle_exception(error, MagicMock())

        body = _body(response)
        assert response["statusCode"] == 400
        assert body["code"] == "VALIDATION_ERROR"
        assert body["message"].startswith("cvv: ")

    def test_unexpected_error_is_logged_and_hidden(self):
        """想定外の例外は詳細を返さず 500 とする"""
        logger = MagicMock()

        response = handle_exception(RuntimeError("db password=secret"), logger)

        assert response["statusCode"] == 500
        assert _body(response)["message"] == INTERNAL_ERROR_MESSAGE
        assert "secret" not in response["body"]
        logger.exception.assert_called_once()


def test_api_response_serializes_body_as_json():
    response = api_response(201, {"success": True})

    assert response["statusCode"] == 201
    assert response["headers"]["Content-Type"] == "application/json"
    assert _body(response) == {"success": True}
