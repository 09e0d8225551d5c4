from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """ドメインイベント基底クラス"""

    aggregate_id: str
    occurred_at: datetime = field(default_factory=_utcnow, kw_only=True)

    @property
    def name(self) -> str:
        return type(self).__name__
