from booking_engine.shared.domain.exception import (
    BusinessRuleViolationException,
    DomainException,
)


class CardDataMissingException(DomainException):
    code = "CARD_DATA_MISSING"
    default_message = "No card attached to this booking"


class DecryptionFailedException(DomainException):
    """保存済みカード情報を復号できない（カードなしとは区別する）"""

    code = "DECRYPTION_FAILED"
    status_code = 500
    default_message = "Failed to decrypt card data"


class VaultFeatureUnavailableException(DomainException):
    """アカウントでカード Vault 機能が有効化されていない"""

    code = "UNAVAILABLE_FEATURE"
    status_code = 403
    default_message = (
        "Card payments are not enabled for this account. Please contact support."
    )


class TokenizationFailedException(DomainException):
    code = "TOKENIZATION_FAILED"
    status_code = 502
    default_message = "Failed to tokenize card"


class IntentCreationFailedException(DomainException):
    code = "INTENT_CREATION_FAILED"
    status_code = 502
    default_message = "Failed to initialize 3D Secure payment"


class RetryLimitExceededException(BusinessRuleViolationException):
    code = "RETRY_LIMIT_EXCEEDED"
    status_code = 403
    default_message = "Maximum retry limit reached. Please contact support."


class OrderCancelledException(BusinessRuleViolationException):
    code = "ORDER_CANCELLED"
    default_message = "This order has been cancelled by the airline"


class PaymentFailedException(DomainException):
    """決済実行に失敗した（試行回数内なら再試行可能）"""

    code = "PAYMENT_FAILED"
    status_code = 402
    default_message = "Payment failed"

    def __init__(
        self, message: str | None = None, attempts_left: int | None = None
    ) -> None:
        message = message or self.default_message
        if attempts_left is not None and attempts_left <= 0:
            attempts_left = 0
            message = f"{message}. {RetryLimitExceededException.default_message}"
        super().__init__(message)
        self.attempts_left = attempts_left

    def details(self) -> dict:
        if self.attempts_left is None:
            return {}
        return {"attempts_left": self.attempts_left}
