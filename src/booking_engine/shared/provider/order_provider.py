from abc import ABC, abstractmethod

from booking_engine.shared.domain.value_object import CardDetails, Money
from booking_engine.shared.provider.models import (
    CardToken,
    PaymentIntent,
    RemoteOffer,
    RemoteOrder,
    RemotePayment,
)


class OrderProvider(ABC):
    """フライト予約プロバイダのポート

    - 失敗は ProviderError（応答あり）/ ProviderUnavailableError（応答なし）で表す
    """

    @abstractmethod
    async def get_offer(self, offer_id: str) -> RemoteOffer:
        raise NotImplementedError

    @abstractmethod
    async def create_hold_order(
        self, offer_id: str, passengers: list[dict]
    ) -> RemoteOrder:
        """支払い保留（pay_later）の注文を作成する"""
        raise NotImplementedError

    @abstractmethod
    async def get_order(self, order_id: str) -> RemoteOrder:
        raise NotImplementedError

    @abstractmethod
    async def tokenize_card(
        self, card: CardDetails, cvc: str, multi_use: bool = False
    ) -> CardToken:
        """カード Vault でカードをトークン化する"""
        raise NotImplementedError

    @abstractmethod
    async def create_payment_intent(self, amount: Money) -> PaymentIntent:
        raise NotImplementedError

    @abstractmethod
    async def confirm_payment_intent(
        self, intent_id: str, card_id: str
    ) -> PaymentIntent:
        raise NotImplementedError

    @abstractmethod
    async def get_payment_intent(self, intent_id: str) -> PaymentIntent:
        raise NotImplementedError

    @abstractmethod
    async def create_payment(self, order_id: str, payment: dict) -> RemotePayment:
        """保留中の注文に対して決済を実行する"""
        raise NotImplementedError
