import asyncio
from datetime import datetime, timezone

from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.repository import BookingRepository
from booking_engine.booking.domain.value_object import TicketDocument
from booking_engine.shared.domain.exception import DomainException
from booking_engine.shared.provider import OrderProvider, ProviderError, RemoteOrder
from booking_engine.shared.utils.logger import get_logger, log_domain_events

logger = get_logger()


def apply_remote_order(booking: Booking, order: RemoteOrder) -> bool:
    """プロバイダ注文の状態を予約に反映する（前方向の遷移のみ）

    予約に変更があった場合のみ True を返す。
    """
    changed = booking.refresh_deadlines(
        order.payment_status.payment_required_by,
        order.payment_status.price_guarantee_expires_at,
    )

    if order.is_cancelled:
        if order.cancellation is not None:
            booking.record_cancellation(
                order.cancellation.model_dump(mode="json", exclude_none=True)
            )
        cancelled_at = (
            order.cancelled_at
            or (order.cancellation.confirmed_at if order.cancellation else None)
            or datetime.now(timezone.utc)
        )
        booking.cancel(
            f"Auto-Sync: Cancelled on provider at {cancelled_at.isoformat()}"
        )
        return True
    if order.is_issued:
        booking.issue(
            [TicketDocument.from_remote(d) for d in order.documents],
            pnr=order.booking_reference,
            note="Auto-Sync: Tickets issued on provider",
        )
        return True
    if booking.status == BookingStatus.PROCESSING:
        booking.hold(order)
        return True
    return changed


class SyncBookingService:
    """照合（Reconciliation）ユースケース

    読み取りのたびにプロバイダ注文を取得し、ローカル予約を追従させる。
    取得に失敗した場合は最後に保存された状態をそのまま返す。
    """

    def __init__(
        self,
        repository: BookingRepository,
        provider: OrderProvider,
        concurrency: int = 5,
    ) -> None:
        self._repository = repository
        self._provider = provider
        self._concurrency = concurrency

    async def sync(self, booking: Booking) -> Booking:
        """1件の予約を照合する"""
        if not booking.order_id or not booking.status.is_syncable:
            return booking

        try:
            order = await self._provider.get_order(booking.order_id)
        except ProviderError as e:
            logger.warning(
                "Reconciliation skipped: order fetch failed",
                extra={
                    "booking_id": str(booking.id),
                    "order_id": booking.order_id,
                    "reason": e.message,
                },
            )
            return booking

        expected_status = booking.status
        try:
            if not apply_remote_order(booking, order):
                return booking
            self._repository.update(booking, expected_status=expected_status)
        except DomainException as e:
            logger.warning(
                "Reconciliation not applied",
                extra={"booking_id": str(booking.id), "reason": e.message},
            )
            return self._repository.find_by_id(booking.id) or booking

        log_domain_events(logger, booking)
        return booking

    async def sync_many(self, bookings: list[Booking]) -> list[Booking]:
        """複数の予約を並行度を制限して照合する（順序は保持）"""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _guarded(booking: Booking) -> Booking:
            async with semaphore:
                return await self.sync(booking)

        return list(await asyncio.gather(*(_guarded(b) for b in bookings)))
