from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.exception import BookingNotFoundException
from booking_engine.booking.domain.repository import BookingRepository
from booking_engine.booking.domain.value_object import BookingId
from booking_engine.payment.domain.enum import CardAction
from booking_engine.payment.domain.exception import (
    IntentCreationFailedException,
    TokenizationFailedException,
    VaultFeatureUnavailableException,
)
from booking_engine.payment.domain.factory import CardDetailsFactory
from booking_engine.payment.domain.value_object import CardAuthorization
from booking_engine.shared.provider import CardToken, OrderProvider, ProviderError
from booking_engine.shared.utils.logger import get_logger

logger = get_logger()


class TokenizeCardService:
    """カードのトークン化と 3D セキュア判定ユースケース

    - 3DS 不要: そのまま決済に進める
    - 3DS 必要: Payment Intent を作成・確認し、チャレンジ用トークンを返す
    """

    def __init__(
        self,
        repository: BookingRepository,
        provider: OrderProvider,
        card_factory: CardDetailsFactory,
    ) -> None:
        self._repository = repository
        self._provider = provider
        self._card_factory = card_factory

    async def tokenize(
        self, booking_id: BookingId, cvv: str, multi_use: bool = False
    ) -> CardAuthorization:
        booking = self._repository.find_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundException(f"Booking not found: {booking_id}")

        card = self._card_factory.create(booking.payment_info)

        try:
            token = await self._provider.tokenize_card(card, cvv, multi_use=multi_use)
        except ProviderError as e:
            if e.status_code == 403 and e.has_code("unavailable_feature"):
                raise VaultFeatureUnavailableException() from e
            raise TokenizationFailedException(
                f"Failed to tokenize card: {e.message}"
            ) from e

        logger.info(
            "Card tokenized",
            extra={
                "booking_id": str(booking.id),
                "three_d_secure_required": token.requires_three_d_secure,
            },
        )

        if not token.requires_three_d_secure:
            return CardAuthorization(
                action=CardAction.PROCEED_TO_PAY, card_token=token.id
            )

        return await self._start_challenge(booking, token)

    async def _start_challenge(
        self, booking: Booking, token: CardToken
    ) -> CardAuthorization:
        """Payment Intent を確認し、必要ならチャレンジ情報を返す"""
        try:
            intent = await self._provider.create_payment_intent(booking.pricing.total)
        except ProviderError as e:
            raise IntentCreationFailedException() from e

        try:
            confirmed = await self._provider.confirm_payment_intent(intent.id, token.id)
        except ProviderError as confirm_error:
            # 3DS が必要なカードでは confirm が失敗し requires_action になる
            logger.info(
                "Payment intent confirmation needs customer action",
                extra={"booking_id": str(booking.id), "payment_intent_id": intent.id},
            )
            try:
                confirmed = await self._provider.get_payment_intent(intent.id)
            except ProviderError as e:
                raise IntentCreationFailedException() from e
            if not confirmed.requires_action:
                raise IntentCreationFailedException() from confirm_error

        if confirmed.requires_action:
            return CardAuthorization(
                action=CardAction.SHOW_3DS_CHALLENGE,
                card_token=token.id,
                challenge_client_token=confirmed.client_token,
                payment_intent_id=confirmed.id,
            )
        return CardAuthorization(action=CardAction.PROCEED_TO_PAY, card_token=token.id)
