from enum import Enum


class BookingStatus(str, Enum):
    """予約ステータス

    - PROCESSING: ローカル仮登録済み、プロバイダ注文作成前
    - HELD: 支払い保留中の注文が存在する
    - ISSUED: 発券済み（終端）
    - CANCELLED: キャンセル済み（終端）
    - FAILED: 注文作成に失敗（終端）
    - EXPIRED: 支払期限切れ（通常は読み取り時に導出）
    """

    PROCESSING = "processing"
    HELD = "held"
    ISSUED = "issued"
    CANCELLED = "cancelled"
    FAILED = "failed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (
            BookingStatus.ISSUED,
            BookingStatus.CANCELLED,
            BookingStatus.FAILED,
            BookingStatus.EXPIRED,
        )

    @property
    def is_syncable(self) -> bool:
        """プロバイダとの照合対象となるステータスか"""
        return self in (BookingStatus.PROCESSING, BookingStatus.HELD)
