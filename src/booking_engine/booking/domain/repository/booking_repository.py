from abc import abstractmethod

from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.value_object import BookingId
from booking_engine.shared.domain import Repository


class BookingRepository(Repository[Booking, BookingId]):
    """予約リポジトリのインターフェース"""

    @abstractmethod
    def find_by_order_id(self, order_id: str) -> Booking | None:
        """プロバイダ注文IDで検索する"""
        raise NotImplementedError

    @abstractmethod
    def find_by_pnr(self, pnr: str) -> list[Booking]:
        """航空会社予約番号(PNR)で検索する"""
        raise NotImplementedError

    @abstractmethod
    def list_recent(self, page: int, limit: int) -> tuple[list[Booking], int]:
        """新しい順に1ページ分を返す（予約一覧, 総件数）"""
        raise NotImplementedError

    @abstractmethod
    def update(
        self, booking: Booking, expected_status: BookingStatus | None = None
    ) -> None:
        """予約を更新する（expected_status 指定時は楽観ロック）"""
        raise NotImplementedError
