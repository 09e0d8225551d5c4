from dataclasses import dataclass, field

from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.exception import BookingNotFoundException
from booking_engine.booking.domain.repository import BookingRepository
from booking_engine.booking.domain.value_object import BookingId, TicketDocument
from booking_engine.payment.domain.enum import PaymentMethod
from booking_engine.payment.domain.exception import (
    OrderCancelledException,
    PaymentFailedException,
    RetryLimitExceededException,
)
from booking_engine.payment.domain.factory import CardDetailsFactory, PaymentFactory
from booking_engine.shared.domain.exception import (
    BusinessRuleViolationException,
    ProviderUnavailableException,
    ValidationException,
)
from booking_engine.shared.domain.value_object import CardDetails, Money
from booking_engine.shared.provider import OrderProvider, ProviderError, RemoteOrder
from booking_engine.shared.utils.logger import get_logger, log_domain_events

logger = get_logger()


@dataclass(frozen=True)
class IssueResult:
    status: BookingStatus
    pnr: str | None
    documents: list[TicketDocument] = field(default_factory=list)
    already_issued: bool = False

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "pnr": self.pnr,
            "documents": [d.to_dict() for d in self.documents],
            "already_issued": self.already_issued,
        }


class IssueTicketService:
    """発券ユースケース

    - 決済の試行は予約ごとに最大 3 回
    - プロバイダ側で発券済みなら課金せずに同期のみ行う（冪等）
    """

    def __init__(
        self,
        repository: BookingRepository,
        provider: OrderProvider,
        card_factory: CardDetailsFactory,
        payment_factory: PaymentFactory | None = None,
    ) -> None:
        self._repository = repository
        self._provider = provider
        self._card_factory = card_factory
        self._payment_factory = payment_factory or PaymentFactory()

    async def issue(
        self,
        booking_id: BookingId,
        method: PaymentMethod,
        cvv: str | None = None,
    ) -> IssueResult:
        booking = self._repository.find_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundException(f"Booking not found: {booking_id}")

        if not booking.has_payment_attempts_left:
            logger.warning(
                "Payment retry limit reached",
                extra={
                    "booking_id": str(booking.id),
                    "retry_count": booking.retry_count,
                },
            )
            raise RetryLimitExceededException()

        if booking.status == BookingStatus.ISSUED and booking.documents:
            return self._result(booking, already_issued=True)
        if booking.status not in (BookingStatus.HELD, BookingStatus.PROCESSING):
            raise BusinessRuleViolationException(
                f"Cannot issue tickets for a {booking.status.value} booking"
            )
        if not booking.order_id:
            raise BusinessRuleViolationException("Booking has no provider order")

        order = await self._fetch_order(booking.order_id)
        expected_status = booking.status

        if order.is_cancelled:
            booking.cancel("Issuance stopped: order cancelled on provider")
            self._repository.update(booking, expected_status=expected_status)
            log_domain_events(logger, booking)
            raise OrderCancelledException()

        if order.is_issued:
            self._apply_issued(booking, order, "Tickets already issued on provider")
            self._repository.update(booking, expected_status=expected_status)
            log_domain_events(logger, booking)
            return self._result(booking, already_issued=True)

        if not order.payment_status.awaiting_payment:
            booking.append_note("Payment already received; awaiting ticket documents")
            self._repository.update(booking, expected_status=expected_status)
            return self._result(booking)

        card = self._card_details(booking, method, cvv)
        payment = self._payment_factory.create(
            Money.of(order.total_amount, order.total_currency), method, card, cvv
        )

        try:
            await self._provider.create_payment(order.id, payment)
            order = await self._provider.get_order(order.id)
        except Exception as e:
            reason = e.message if isinstance(e, ProviderError) else str(e)
            booking.record_payment_failure(reason or type(e).__name__)
            self._repository.update(booking, expected_status=expected_status)
            log_domain_events(logger, booking)
            attempts_left = booking.MAX_PAYMENT_ATTEMPTS - booking.retry_count
            raise PaymentFailedException(
                f"Payment failed: {reason}", attempts_left=attempts_left
            ) from e

        logger.info(
            "Payment executed",
            extra={
                "booking_id": str(booking.id),
                "order_id": order.id,
                "method": method.value,
            },
        )

        if order.is_issued:
            self._apply_issued(booking, order, f"Ticket issued via {method.value}")
        else:
            booking.append_note(
                f"Payment via {method.value} accepted; awaiting ticket documents"
            )
        self._repository.update(booking, expected_status=expected_status)
        log_domain_events(logger, booking)
        return self._result(booking)

    async def _fetch_order(self, order_id: str) -> RemoteOrder:
        try:
            return await self._provider.get_order(order_id)
        except ProviderError as e:
            raise ProviderUnavailableException(
                f"Could not load order from provider: {e.message}"
            ) from e

    def _card_details(
        self, booking: Booking, method: PaymentMethod, cvv: str | None
    ) -> CardDetails | None:
        if method is not PaymentMethod.CARD:
            return None
        if not cvv:
            raise ValidationException("CVV is required for card payments")
        return self._card_factory.create(booking.payment_info)

    @staticmethod
    def _apply_issued(booking: Booking, order: RemoteOrder, note: str) -> None:
        booking.issue(
            [TicketDocument.from_remote(d) for d in order.documents],
            pnr=order.booking_reference,
            note=note,
        )

    @staticmethod
    def _result(booking: Booking, already_issued: bool = False) -> IssueResult:
        return IssueResult(
            status=booking.status,
            pnr=booking.pnr,
            documents=booking.documents,
            already_issued=already_issued,
        )
