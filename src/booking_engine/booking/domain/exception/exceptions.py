from booking_engine.shared.domain.exception import (
    DomainException,
    ResourceNotFoundException,
    ValidationException,
)


class BookingNotFoundException(ResourceNotFoundException):
    code = "BOOKING_NOT_FOUND"
    default_message = "Booking not found"


class OfferExpiredException(DomainException):
    """オファーが取得できない、または予約不可になった場合"""

    code = "OFFER_EXPIRED"
    status_code = 410
    default_message = "This offer is no longer available. Please search again."


class InstantPaymentRequiredException(DomainException):
    """即時支払いが必要なオファー（保留予約不可）"""

    code = "INSTANT_PAYMENT_REQUIRED"
    status_code = 422
    default_message = (
        "This fare requires instant payment and cannot be held. "
        "Please choose another flight."
    )


class PassengerValidationException(ValidationException):
    """搭乗者構成・年齢区分が不正な場合"""


class OrderCreationFailedException(DomainException):
    """プロバイダが注文作成を拒否した場合"""

    code = "ORDER_CREATION_FAILED"
    status_code = 502
    default_message = "Failed to create the order with the airline"


class InvalidWebhookException(DomainException):
    """Webhook の署名・形式が不正な場合"""

    code = "INVALID_SIGNATURE"
    status_code = 401
    default_message = "Invalid webhook signature"
