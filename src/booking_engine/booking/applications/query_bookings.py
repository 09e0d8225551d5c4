from dataclasses import dataclass

from booking_engine.booking.applications.sync_booking import SyncBookingService
from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.exception import BookingNotFoundException
from booking_engine.booking.domain.repository import BookingRepository
from booking_engine.booking.domain.value_object import BookingId


@dataclass(frozen=True)
class BookingPage:
    bookings: list[Booking]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


class QueryBookingsService:
    """予約参照ユースケース（参照のたびに照合を行う）"""

    def __init__(
        self, repository: BookingRepository, sync_service: SyncBookingService
    ) -> None:
        self._repository = repository
        self._sync_service = sync_service

    async def get(self, booking_id: BookingId) -> Booking:
        booking = self._repository.find_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundException(f"Booking not found: {booking_id}")
        return await self._sync_service.sync(booking)

    async def list_page(self, page: int = 1, limit: int = 20) -> BookingPage:
        bookings, total = self._repository.list_recent(page, limit)
        synced = await self._sync_service.sync_many(bookings)
        return BookingPage(bookings=synced, total=total, page=page, limit=limit)

    async def lookup(self, pnr: str, email: str) -> Booking:
        """PNR とメールアドレスが一致する予約を返す（公開照会用）"""
        normalized_email = email.strip().lower()
        candidates = self._repository.find_by_pnr(pnr.strip().upper())
        booking = next(
            (b for b in candidates if b.contact.email == normalized_email), None
        )
        if booking is None:
            raise BookingNotFoundException(
                "No booking found with the given PNR and email"
            )
        return await self._sync_service.sync(booking)
