import hashlib
import hmac
import time

TOLERANCE_SECONDS = 300


class InvalidSignatureError(Exception):
    """Webhook 署名の検証に失敗した場合"""


def _parse_header(header: str) -> tuple[str, str]:
    parts = dict(
        item.split("=", 1) for item in header.split(",") if "=" in item
    )
    timestamp = parts.get("t", "").strip()
    signature = parts.get("v1", "").strip()
    if not timestamp or not signature:
        raise InvalidSignatureError("Malformed signature header")
    return timestamp, signature


def verify_signature(
    header: str | None,
    body: str,
    secret: str,
    now: float | None = None,
    tolerance: int = TOLERANCE_SECONDS,
) -> None:
    """プロバイダ Webhook の署名を検証する

    ヘッダ形式: "t=<unix秒>,v1=<hex>"。署名対象は "<t>.<raw body>"（HMAC-SHA256）。
    """
    if not header:
        raise InvalidSignatureError("Missing signature header")
    if not secret:
        raise InvalidSignatureError("Webhook secret is not configured")

    timestamp, signature = _parse_header(header)
    try:
        signed_at = int(timestamp)
    except ValueError as e:
        raise InvalidSignatureError("Invalid signature timestamp") from e

    current = time.time() if now is None else now
    if abs(current - signed_at) > tolerance:
        raise InvalidSignatureError("Signature timestamp outside tolerance")

    expected = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{body}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    if not hmac.compare_digest(expected, signature):
        raise InvalidSignatureError("Signature mismatch")


def sign(body: str, secret: str, timestamp: int) -> str:
    """署名ヘッダ値を生成する"""
    digest = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{body}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={digest}"
