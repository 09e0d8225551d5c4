import json

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from booking_engine.shared.domain.exception import DomainException

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def api_response(status_code: int, body: dict) -> dict:
    """API Gateway HTTP API のレスポンス形式を生成する"""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def error_response(exc: DomainException) -> dict:
    """ドメイン例外を {success, message, code} 形式に変換する"""
    return api_response(
        exc.status_code,
        {
            "success": False,
            "message": exc.message,
            "code": exc.code,
            **exc.details(),
        },
    )


def validation_error_response(exc: ValidationError) -> dict:
    """リクエストバリデーションエラーを 400 に変換する"""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid request")
    return api_response(
        400,
        {
            "success": False,
            "message": f"{location}: {message}" if location else message,
            "code": "VALIDATION_ERROR",
        },
    )


def handle_exception(exc: Exception, logger: Logger) -> dict:
    """ハンドラ境界で例外をレスポンスに変換する

    想定外の例外はスタックトレースを記録し、汎用メッセージで返す。
    """
    if isinstance(exc, ValidationError):
        logger.warning("Request validation failed", extra={"errors": exc.errors()})
        return validation_error_response(exc)
    if isinstance(exc, DomainException):
        logger.warning(
            "Request rejected", extra={"code": exc.code, "reason": exc.message}
        )
        return error_response(exc)
    logger.exception("Unhandled error")
    return api_response(
        500,
        {"success": False, "message": INTERNAL_ERROR_MESSAGE, "code": "INTERNAL_ERROR"},
    )
