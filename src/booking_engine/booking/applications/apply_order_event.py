from typing import Any

from pydantic import ValidationError

from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.repository import BookingRepository
from booking_engine.booking.domain.value_object import TicketDocument
from booking_engine.shared.domain.exception import BusinessRuleViolationException
from booking_engine.shared.provider.models import OrderDocument, RemoteOrder
from booking_engine.shared.utils.logger import get_logger, log_domain_events

logger = get_logger()

TICKETS_ISSUED = "order.tickets_issued"
ORDER_CREATED = "order.created"
PAYMENT_FAILED = "air.payment.failed"
CANCELLATION_CREATED = "order_cancellation.created"
CANCELLATION_CONFIRMED = "order.cancellation.confirmed"
AIRLINE_CHANGE_DETECTED = "order.airline_initiated_change_detected"


class ApplyOrderEventService:
    """プロバイダ Webhook イベントの反映ユースケース

    照合処理と同じく前方向の遷移のみを適用する。
    対象予約が見つからないイベントは記録して受理する。
    """

    def __init__(self, repository: BookingRepository) -> None:
        self._repository = repository
        self._handlers = {
            TICKETS_ISSUED: self._on_tickets_issued,
            ORDER_CREATED: self._on_order_created,
            PAYMENT_FAILED: self._on_payment_failed,
            CANCELLATION_CREATED: self._on_cancellation,
            CANCELLATION_CONFIRMED: self._on_cancellation,
            AIRLINE_CHANGE_DETECTED: self._on_airline_change,
        }

    def apply(self, event_type: str, data: dict[str, Any]) -> str:
        """イベントを適用し、処理結果（applied / ignored / unknown_order）を返す"""
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info("Ignoring webhook event", extra={"event_type": event_type})
            return "ignored"

        payload = data.get("object", data)
        order_id = payload.get("order_id") or payload.get("id")
        booking = self._repository.find_by_order_id(order_id) if order_id else None
        if booking is None:
            logger.warning(
                "Webhook for unknown order",
                extra={"event_type": event_type, "order_id": order_id},
            )
            return "unknown_order"

        expected_status = booking.status
        try:
            handler(booking, payload)
        except (BusinessRuleViolationException, ValidationError) as e:
            logger.warning(
                "Webhook event not applicable",
                extra={
                    "event_type": event_type,
                    "booking_id": str(booking.id),
                    "reason": str(e),
                },
            )
            return "ignored"

        self._repository.update(booking, expected_status=expected_status)
        log_domain_events(logger, booking)
        return "applied"

    @staticmethod
    def _on_tickets_issued(booking: Booking, payload: dict[str, Any]) -> None:
        documents = [
            TicketDocument.from_remote(OrderDocument.model_validate(d))
            for d in payload.get("documents") or []
        ]
        booking.issue(
            documents,
            pnr=payload.get("booking_reference"),
            note="Webhook: Tickets issued on provider",
        )

    @staticmethod
    def _on_order_created(booking: Booking, payload: dict[str, Any]) -> None:
        order = RemoteOrder.model_validate(payload)
        if booking.status == BookingStatus.PROCESSING:
            booking.hold(order)
            return
        booking.refresh_deadlines(
            order.payment_status.payment_required_by,
            order.payment_status.price_guarantee_expires_at,
        )

    @staticmethod
    def _on_payment_failed(booking: Booking, payload: dict[str, Any]) -> None:
        reason = payload.get("error_message") or "Unknown"
        booking.append_note(f"Webhook: Payment failed on provider. Reason: {reason}")

    @staticmethod
    def _on_cancellation(booking: Booking, payload: dict[str, Any]) -> None:
        cancellation = {
            key: payload[key]
            for key in (
                "refund_amount",
                "refund_currency",
                "penalty_amount",
                "penalty_currency",
                "refunded_at",
                "confirmed_at",
            )
            if payload.get(key) is not None
        }
        if cancellation:
            booking.record_cancellation(cancellation)
        booking.cancel("Webhook: Order cancelled on provider")

    @staticmethod
    def _on_airline_change(booking: Booking, payload: dict[str, Any]) -> None:
        booking.record_airline_change(payload)
