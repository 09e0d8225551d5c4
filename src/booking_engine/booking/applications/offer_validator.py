from datetime import datetime, timezone

from booking_engine.booking.domain.exception import (
    InstantPaymentRequiredException,
    OfferExpiredException,
)
from booking_engine.shared.provider import OrderProvider, ProviderError, RemoteOffer
from booking_engine.shared.utils.logger import get_logger

logger = get_logger()


class OfferValidator:
    """オファー再検証ユースケース

    予約直前にプロバイダからオファーを取り直し、保留予約が可能かを確認する。
    """

    def __init__(self, provider: OrderProvider) -> None:
        self._provider = provider

    async def ensure_bookable(self, offer_id: str) -> RemoteOffer:
        """予約可能なオファーを返す（不可なら例外）"""
        try:
            offer = await self._provider.get_offer(offer_id)
        except ProviderError as e:
            logger.info(
                "Offer could not be fetched",
                extra={"offer_id": offer_id, "provider_code": e.code},
            )
            raise OfferExpiredException() from e

        now = datetime.now(timezone.utc)
        if offer.expires_at is not None and offer.expires_at < now:
            logger.info("Offer has expired", extra={"offer_id": offer_id})
            raise OfferExpiredException()

        if offer.requires_instant_payment:
            logger.info("Offer requires instant payment", extra={"offer_id": offer_id})
            raise InstantPaymentRequiredException()

        return offer
