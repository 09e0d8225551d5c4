from dataclasses import dataclass

from booking_engine.shared.domain.entity import DomainEvent


@dataclass(frozen=True)
class BookingStatusChanged(DomainEvent):
    """予約ステータスが遷移した"""

    from_status: str
    to_status: str
    reason: str | None = None


@dataclass(frozen=True)
class PaymentAttemptFailed(DomainEvent):
    """決済試行が失敗した"""

    retry_count: int
    reason: str
