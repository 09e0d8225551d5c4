from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, ClassVar

from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.event import (
    BookingStatusChanged,
    PaymentAttemptFailed,
)
from booking_engine.booking.domain.value_object import (
    BookingId,
    BookingReference,
    Contact,
    FlightDetails,
    Passenger,
    PaymentInfo,
    Pricing,
    TicketDocument,
)
from booking_engine.shared.domain import AggregateRoot
from booking_engine.shared.domain.exception import (
    BusinessRuleViolationException,
    ValidationException,
)
from booking_engine.shared.provider.models import RemoteOrder


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(AggregateRoot[BookingId]):
    """フライト予約（集約ルート）

    ローカルの予約レコード。正本はプロバイダ側の注文で、
    照合（Reconciliation）によって前方向にのみ追従する。

    - processing → held | failed
    - held → issued | cancelled
    - expired は読み取り時に導出（管理者の上書き時のみ永続化）
    """

    MAX_PAYMENT_ATTEMPTS: ClassVar[int] = 3

    def __init__(
        self,
        id: BookingId,
        reference: BookingReference,
        offer_id: str,
        contact: Contact,
        passengers: list[Passenger],
        flight_details: FlightDetails,
        pricing: Pricing,
        payment_info: PaymentInfo | None = None,
        status: BookingStatus = BookingStatus.PROCESSING,
        order_id: str | None = None,
        pnr: str | None = None,
        documents: list[TicketDocument] | None = None,
        retry_count: int = 0,
        last_retry_at: datetime | None = None,
        admin_notes: list[str] | None = None,
        payment_deadline: datetime | None = None,
        price_expiry: datetime | None = None,
        is_live_mode: bool = False,
        airline_initiated_changes: dict[str, Any] | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> None:
        super().__init__(id)

        self._reference = reference
        self._offer_id = offer_id
        self._contact = contact
        self._passengers = list(passengers)
        self._flight_details = flight_details
        self._pricing = pricing
        self._payment_info = payment_info
        self._status = status
        self._order_id = order_id
        self._pnr = pnr
        self._documents = list(documents or [])
        self._retry_count = retry_count
        self._last_retry_at = last_retry_at
        self._admin_notes = list(admin_notes or [])
        self._payment_deadline = payment_deadline
        self._price_expiry = price_expiry
        self._is_live_mode = is_live_mode
        self._airline_initiated_changes = dict(airline_initiated_changes or {})
        self._created_at = created_at or _utcnow()
        self._updated_at = updated_at or self._created_at

        self._validate()

    def _validate(self) -> None:
        if not self._offer_id:
            raise ValidationException("Offer ID is required")
        if not self._passengers:
            raise ValidationException("At least one passenger is required")
        if not 0 <= self._retry_count <= self.MAX_PAYMENT_ATTEMPTS:
            raise BusinessRuleViolationException(
                f"Retry count out of range: {self._retry_count}"
            )

    @property
    def reference(self) -> BookingReference:
        return self._reference

    @property
    def offer_id(self) -> str:
        return self._offer_id

    @property
    def contact(self) -> Contact:
        return self._contact

    @property
    def passengers(self) -> list[Passenger]:
        return list(self._passengers)

    @property
    def lead_passenger(self) -> Passenger:
        return self._passengers[0]

    @property
    def flight_details(self) -> FlightDetails:
        return self._flight_details

    @property
    def pricing(self) -> Pricing:
        return self._pricing

    @property
    def payment_info(self) -> PaymentInfo | None:
        return self._payment_info

    @property
    def status(self) -> BookingStatus:
        return self._status

    @property
    def order_id(self) -> str | None:
        return self._order_id

    @property
    def pnr(self) -> str | None:
        return self._pnr

    @property
    def documents(self) -> list[TicketDocument]:
        return list(self._documents)

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def last_retry_at(self) -> datetime | None:
        return self._last_retry_at

    @property
    def admin_notes(self) -> list[str]:
        return list(self._admin_notes)

    @property
    def payment_deadline(self) -> datetime | None:
        return self._payment_deadline

    @property
    def price_expiry(self) -> datetime | None:
        return self._price_expiry

    @property
    def is_live_mode(self) -> bool:
        return self._is_live_mode

    @property
    def airline_initiated_changes(self) -> dict[str, Any]:
        return dict(self._airline_initiated_changes)

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def has_payment_attempts_left(self) -> bool:
        return self._retry_count < self.MAX_PAYMENT_ATTEMPTS

    def effective_status(self, now: datetime | None = None) -> BookingStatus:
        """表示用ステータス（支払期限切れの held は expired とみなす）"""
        now = now or _utcnow()
        if (
            self._status == BookingStatus.HELD
            and self._payment_deadline is not None
            and self._payment_deadline < now
        ):
            return BookingStatus.EXPIRED
        return self._status

    def time_left(self, now: datetime | None = None) -> timedelta | None:
        """支払期限までの残り時間（期限なしは None、超過は 0）"""
        if self._payment_deadline is None:
            return None
        remaining = self._payment_deadline - (now or _utcnow())
        return max(remaining, timedelta(0))

    def hold(self, order: RemoteOrder) -> None:
        """プロバイダの保留注文を反映し held にする"""
        if self._status != BookingStatus.PROCESSING:
            raise BusinessRuleViolationException(
                f"Cannot hold booking in {self._status.value} status"
            )

        self._order_id = order.id
        self._pnr = order.booking_reference
        self._pricing = self._pricing.with_base_amount(order.total_amount)
        self._is_live_mode = order.live_mode
        self._payment_deadline = order.payment_status.payment_required_by
        self._price_expiry = order.payment_status.price_guarantee_expires_at
        if order.airline_initiated_changes:
            self._airline_initiated_changes["changes"] = list(
                order.airline_initiated_changes
            )
        self._transition(BookingStatus.HELD, "Order held with provider")

    def mark_failed(self, reason: str) -> None:
        """注文作成の失敗を記録する"""
        if self._status != BookingStatus.PROCESSING:
            raise BusinessRuleViolationException(
                f"Cannot fail booking in {self._status.value} status"
            )
        self.append_note(f"Order creation failed: {reason}")
        self._transition(BookingStatus.FAILED, reason)

    def issue(
        self,
        documents: list[TicketDocument],
        pnr: str | None = None,
        note: str | None = None,
    ) -> None:
        """発券済みにする（発券済みなら書類とPNRのみ更新）"""
        if not documents:
            raise BusinessRuleViolationException(
                "Cannot issue a booking without travel documents"
            )
        if self._status not in (
            BookingStatus.PROCESSING,
            BookingStatus.HELD,
            BookingStatus.ISSUED,
        ):
            raise BusinessRuleViolationException(
                f"Cannot issue booking in {self._status.value} status"
            )

        self._documents = list(documents)
        if pnr:
            self._pnr = pnr
        self._retry_count = 0
        if note:
            self.append_note(note)

        if self._status == BookingStatus.ISSUED:
            self._touch()
            return
        self._transition(BookingStatus.ISSUED, note)

    def cancel(self, note: str | None = None) -> None:
        """キャンセル済みにする（キャンセル済みなら何もしない）"""
        if self._status == BookingStatus.CANCELLED:
            return
        if self._status.is_terminal:
            raise BusinessRuleViolationException(
                f"Cannot cancel booking in {self._status.value} status"
            )
        if note:
            self.append_note(note)
        self._transition(BookingStatus.CANCELLED, note)

    def refresh_deadlines(
        self,
        payment_deadline: datetime | None,
        price_expiry: datetime | None = None,
    ) -> bool:
        """プロバイダから取得した期限を反映する（変更があれば True）"""
        changed = False
        if payment_deadline is not None and payment_deadline != self._payment_deadline:
            self._payment_deadline = payment_deadline
            changed = True
        if price_expiry is not None and price_expiry != self._price_expiry:
            self._price_expiry = price_expiry
            changed = True
        if changed:
            self._touch()
        return changed

    def record_payment_failure(self, reason: str, at: datetime | None = None) -> None:
        """決済失敗を記録し、試行回数を1増やす（held のまま）"""
        if not self.has_payment_attempts_left:
            raise BusinessRuleViolationException("Payment retry limit reached")

        self._retry_count += 1
        self._last_retry_at = at or _utcnow()
        self.append_note(
            f"Payment attempt {self._retry_count}/{self.MAX_PAYMENT_ATTEMPTS} "
            f"failed: {reason}"
        )
        self._record(
            PaymentAttemptFailed(
                aggregate_id=str(self.id),
                retry_count=self._retry_count,
                reason=reason,
            )
        )

    def record_airline_change(self, change: dict[str, Any]) -> None:
        changes = list(self._airline_initiated_changes.get("changes", []))
        changes.append(change)
        self._airline_initiated_changes["changes"] = changes
        self.append_note("Airline initiated change detected")

    def record_cancellation(self, cancellation: dict[str, Any]) -> None:
        """返金・違約金などのキャンセル詳細を保存する"""
        self._airline_initiated_changes["cancellation"] = cancellation
        self._touch()

    def override_status(self, status: BookingStatus, note: str) -> None:
        """管理者によるステータス上書き（監査メモ必須）"""
        if not note or not note.strip():
            raise ValidationException("An audit note is required for overrides")
        if status == BookingStatus.ISSUED and not self._documents:
            raise BusinessRuleViolationException(
                "Cannot mark as issued without travel documents on file"
            )

        previous = self._status
        self.append_note(
            f"Admin override: {previous.value} -> {status.value}: {note.strip()}"
        )
        if previous != status:
            self._transition(status, note.strip())

    def append_note(self, note: str, at: datetime | None = None) -> None:
        timestamp = (at or _utcnow()).isoformat(timespec="seconds")
        self._admin_notes.append(f"[{timestamp}] {note}")
        self._touch()

    def _transition(self, status: BookingStatus, reason: str | None = None) -> None:
        previous = self._status
        self._status = status
        self._touch()
        self._record(
            BookingStatusChanged(
                aggregate_id=str(self.id),
                from_status=previous.value,
                to_status=status.value,
                reason=reason,
            )
        )

    def _touch(self) -> None:
        self._updated_at = _utcnow()
