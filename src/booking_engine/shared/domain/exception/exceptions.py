from typing import ClassVar


class DomainException(Exception):
    """ドメイン層で発生する基底例外

    code / status_code は API 境界でエラーレスポンスに変換される。
    """

    code: ClassVar[str] = "DOMAIN_ERROR"
    status_code: ClassVar[int] = 400
    default_message: ClassVar[str] = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def details(self) -> dict:
        """エラーレスポンスに付加する項目"""
        return {}


class ValidationException(DomainException):
    """入力値がビジネス上のバリデーションに失敗した場合"""

    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class ResourceNotFoundException(DomainException):
    """リソースが見つからない場合"""

    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class BusinessRuleViolationException(DomainException):
    """ビジネスルールに違反した場合"""

    code = "BUSINESS_RULE_VIOLATION"
    status_code = 409
    default_message = "Business rule violated"


class DuplicateResourceException(DomainException):
    """リソースの重複エラー（条件付き書き込みの失敗時）"""

    code = "DUPLICATE_ERROR"
    status_code = 409
    default_message = "Resource already exists"


class OptimisticLockException(DomainException):
    """楽観ロックの競合エラー（ステータスが期待値と異なる場合）"""

    code = "CONFLICT"
    status_code = 409
    default_message = "Resource was modified concurrently"


class TooManyRequestsException(DomainException):
    """レート制限を超過した場合"""

    code = "TOO_MANY_REQUESTS"
    status_code = 429
    default_message = "Too many requests. Please try again later."


class ProviderUnavailableException(DomainException):
    """外部プロバイダに到達できない場合"""

    code = "PROVIDER_UNAVAILABLE"
    status_code = 502
    default_message = "Booking provider is unavailable"
