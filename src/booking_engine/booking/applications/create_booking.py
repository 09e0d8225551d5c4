from dataclasses import dataclass
from datetime import date, datetime, timezone

from booking_engine.booking.applications.offer_validator import OfferValidator
from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.exception import (
    InstantPaymentRequiredException,
    OfferExpiredException,
    OrderCreationFailedException,
)
from booking_engine.booking.domain.factory import BookingDetails, BookingFactory
from booking_engine.booking.domain.repository import BookingRepository
from booking_engine.booking.domain.service.passenger_rules import (
    assign_offer_passenger_ids,
    build_order_passengers,
    validate_passenger_mix,
)
from booking_engine.shared.domain.exception import (
    DomainException,
    DuplicateResourceException,
)
from booking_engine.shared.notification import BookingConfirmation, Notifier
from booking_engine.shared.provider import OrderProvider, ProviderError
from booking_engine.shared.utils.logger import get_logger, log_domain_events

logger = get_logger()


@dataclass(frozen=True)
class BookingResult:
    booking_id: str
    reference: str
    pnr: str | None
    expiry: datetime | None


class CreateBookingService:
    """予約受付ユースケース

    1. オファー・搭乗者を検証する
    2. processing の予約をローカルに仮登録する
    3. プロバイダで保留注文を作成する
    4. 結果（held / failed）をローカルに確定する
    """

    MAX_REFERENCE_ATTEMPTS = 3

    def __init__(
        self,
        repository: BookingRepository,
        provider: OrderProvider,
        factory: BookingFactory,
        notifier: Notifier | None = None,
        default_passport_country: str = "US",
    ) -> None:
        self._repository = repository
        self._provider = provider
        self._factory = factory
        self._notifier = notifier
        self._offer_validator = OfferValidator(provider)
        self._default_passport_country = default_passport_country

    async def create(self, details: BookingDetails) -> BookingResult:
        """予約を作成し、保留注文の情報を返す"""
        today = datetime.now(timezone.utc).date()

        validate_passenger_mix(details["passengers"], today)
        offer = await self._offer_validator.ensure_bookable(details["offer_id"])

        passengers = assign_offer_passenger_ids(
            details["passengers"], [(p.id, p.type) for p in offer.passengers]
        )
        order_passengers = build_order_passengers(
            passengers,
            details["contact"],
            today,
            default_country=self._default_passport_country,
        )

        booking = self._register(dict(details, passengers=passengers), today)
        logger.info(
            "Booking registered",
            extra={"booking_id": str(booking.id), "reference": str(booking.reference)},
        )

        try:
            order = await self._provider.create_hold_order(
                details["offer_id"], order_passengers
            )
        except ProviderError as e:
            error = self._to_domain_error(e)
            booking.mark_failed(e.message)
            self._repository.update(booking, expected_status=BookingStatus.PROCESSING)
            log_domain_events(logger, booking)
            raise error from e

        booking.hold(order)
        self._repository.update(booking, expected_status=BookingStatus.PROCESSING)
        log_domain_events(logger, booking)

        await self._notify(booking)

        return BookingResult(
            booking_id=str(booking.id),
            reference=str(booking.reference),
            pnr=booking.pnr,
            expiry=booking.payment_deadline,
        )

    def _register(self, details: BookingDetails, today: date) -> Booking:
        """予約番号が重複した場合は再生成して保存し直す"""
        attempt = 1
        while True:
            booking = self._factory.create(
                details, reference=self._factory.new_reference(today)
            )
            try:
                self._repository.save(booking)
                return booking
            except DuplicateResourceException:
                if attempt >= self.MAX_REFERENCE_ATTEMPTS:
                    raise
                logger.warning(
                    "Booking reference collision, regenerating",
                    extra={"reference": str(booking.reference), "attempt": attempt},
                )
                attempt += 1

    @staticmethod
    def _to_domain_error(error: ProviderError) -> DomainException:
        if error.has_code("offer_no_longer_available"):
            return OfferExpiredException()
        if error.has_code("instant_payment_required"):
            return InstantPaymentRequiredException()
        return OrderCreationFailedException(
            f"Failed to create the order with the airline: {error.message}"
        )

    async def _notify(self, booking: Booking) -> None:
        """確認メールを送信する（失敗しても予約は成功扱い）"""
        if self._notifier is None:
            return

        lead = booking.lead_passenger
        message = BookingConfirmation(
            recipient=booking.contact.email,
            passenger_name=lead.full_name,
            reference=str(booking.reference),
            pnr=booking.pnr,
            route=booking.flight_details.route,
            departure_date=booking.flight_details.departure_date,
            total=str(booking.pricing.total),
            payment_deadline=(
                booking.payment_deadline.isoformat()
                if booking.payment_deadline
                else None
            ),
        )
        try:
            await self._notifier.send_booking_confirmation(message)
        except Exception:
            logger.exception(
                "Failed to send booking confirmation",
                extra={"booking_id": str(booking.id)},
            )
