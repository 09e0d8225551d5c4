from __future__ import annotations

from typing import Any

import httpx

from booking_engine.shared.config import Settings
from booking_engine.shared.domain.value_object import CardDetails, Money
from booking_engine.shared.provider.exceptions import (
    ProviderError,
    ProviderUnavailableError,
)
from booking_engine.shared.provider.models import (
    CardToken,
    PaymentIntent,
    RemoteOffer,
    RemoteOrder,
    RemotePayment,
)
from booking_engine.shared.provider.order_provider import OrderProvider
from booking_engine.shared.utils.logger import get_logger

logger = get_logger()


class DuffelOrderProvider(OrderProvider):
    """Duffel API を使用した OrderProvider の具象実装

    - 1 Lambda 呼び出しにつき 1 クライアント（async with で確実に close する）
    - カード Vault は別ホスト・短いタイムアウトで呼び出す
    """

    def __init__(
        self,
        access_token: str,
        api_url: str = "https://api.duffel.com",
        vault_url: str = "https://api.duffel.cards",
        version: str = "v2",
        timeout: float = 30.0,
        vault_timeout: float = 8.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._access_token = access_token
        self._api_url = api_url.rstrip("/")
        self._vault_url = vault_url.rstrip("/")
        self._version = version
        self._vault_timeout = vault_timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> DuffelOrderProvider:
        return cls(
            access_token=settings.DUFFEL_ACCESS_TOKEN,
            api_url=settings.DUFFEL_API_URL,
            vault_url=settings.DUFFEL_VAULT_URL,
            version=settings.DUFFEL_VERSION,
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
            vault_timeout=settings.VAULT_TIMEOUT_SECONDS,
        )

    async def __aenter__(self) -> DuffelOrderProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Duffel-Version": self._version,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """リクエストを送信し、レスポンスの data を返す"""
        kwargs: dict[str, Any] = {"headers": self._headers(), "json": json}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(
                "Provider request failed",
                extra={"method": method, "url": url, "error": type(e).__name__},
            )
            raise ProviderUnavailableError(f"Provider request failed: {e}") from e

        if response.is_error:
            raise self._to_error(response)

        return response.json().get("data") or {}

    @staticmethod
    def _to_error(response: httpx.Response) -> ProviderError:
        """エラー応答 {"errors": [{code, title, message}]} を例外に変換する"""
        try:
            errors = response.json().get("errors") or []
        except ValueError:
            errors = []

        first = errors[0] if errors else {}
        message = (
            first.get("message")
            or first.get("title")
            or f"Provider returned HTTP {response.status_code}"
        )
        logger.warning(
            "Provider returned error",
            extra={
                "status_code": response.status_code,
                "code": first.get("code"),
                "url": str(response.request.url),
            },
        )
        return ProviderError(
            message,
            status_code=response.status_code,
            code=first.get("code"),
            errors=errors,
        )

    async def get_offer(self, offer_id: str) -> RemoteOffer:
        data = await self._request("GET", f"{self._api_url}/air/offers/{offer_id}")
        return RemoteOffer.model_validate(data)

    async def create_hold_order(
        self, offer_id: str, passengers: list[dict]
    ) -> RemoteOrder:
        payload = {
            "data": {
                "type": "pay_later",
                "selected_offers": [offer_id],
                "passengers": passengers,
            }
        }
        data = await self._request(
            "POST", f"{self._api_url}/air/orders", json=payload
        )
        return RemoteOrder.model_validate(data)

    async def get_order(self, order_id: str) -> RemoteOrder:
        data = await self._request("GET", f"{self._api_url}/air/orders/{order_id}")
        return RemoteOrder.model_validate(data)

    async def tokenize_card(
        self, card: CardDetails, cvc: str, multi_use: bool = False
    ) -> CardToken:
        payload = {
            "data": {
                "number": card.number,
                "cvc": cvc,
                "expiry_month": card.expiry_month,
                "expiry_year": card.expiry_year,
                "name": card.holder_name,
                "address_line_1": card.address_line_1 or None,
                "address_city": card.address_city or None,
                "address_postal_code": card.address_postal_code or None,
                "address_country_code": card.address_country_code or "US",
                "multi_use": multi_use,
            }
        }
        data = await self._request(
            "POST",
            f"{self._vault_url}/payments/cards",
            json=payload,
            timeout=self._vault_timeout,
        )
        return CardToken.model_validate(data)

    async def create_payment_intent(self, amount: Money) -> PaymentIntent:
        payload = {
            "data": {
                "amount": amount.formatted_amount,
                "currency": str(amount.currency),
            }
        }
        data = await self._request(
            "POST", f"{self._api_url}/payments/payment_intents", json=payload
        )
        return PaymentIntent.model_validate(data)

    async def confirm_payment_intent(
        self, intent_id: str, card_id: str
    ) -> PaymentIntent:
        payload = {"data": {"payment_method": {"type": "card", "card_id": card_id}}}
        data = await self._request(
            "POST",
            f"{self._api_url}/payments/payment_intents/{intent_id}/actions/confirm",
            json=payload,
        )
        return PaymentIntent.model_validate(data)

    async def get_payment_intent(self, intent_id: str) -> PaymentIntent:
        data = await self._request(
            "GET", f"{self._api_url}/payments/payment_intents/{intent_id}"
        )
        return PaymentIntent.model_validate(data)

    async def create_payment(self, order_id: str, payment: dict) -> RemotePayment:
        payload = {"data": {"order_id": order_id, "payment": payment}}
        data = await self._request(
            "POST", f"{self._api_url}/air/payments", json=payload
        )
        return RemotePayment.model_validate(data)
