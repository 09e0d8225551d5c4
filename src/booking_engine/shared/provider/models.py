from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderModel(BaseModel):
    """プロバイダ応答の共通設定（未知のフィールドは無視する）"""

    model_config = ConfigDict(extra="ignore")


class PaymentRequirements(ProviderModel):
    requires_instant_payment: bool = False
    payment_required_by: datetime | None = None
    price_guarantee_expires_at: datetime | None = None


class OfferPassenger(ProviderModel):
    id: str
    type: str | None = None


class RemoteOffer(ProviderModel):
    """プロバイダのオファー（予約可能な運賃）"""

    id: str
    total_amount: Decimal
    total_currency: str
    expires_at: datetime | None = None
    passengers: list[OfferPassenger] = Field(default_factory=list)
    payment_requirements: PaymentRequirements = Field(
        default_factory=PaymentRequirements
    )

    @field_validator("passengers", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    @property
    def requires_instant_payment(self) -> bool:
        return self.payment_requirements.requires_instant_payment


class OrderDocument(ProviderModel):
    unique_identifier: str | None = None
    type: str | None = None
    url: str | None = None


class OrderPaymentStatus(ProviderModel):
    awaiting_payment: bool = True
    payment_required_by: datetime | None = None
    price_guarantee_expires_at: datetime | None = None


class OrderCancellation(ProviderModel):
    id: str | None = None
    confirmed_at: datetime | None = None
    refund_amount: Decimal | None = None
    refund_currency: str | None = None
    penalty_amount: Decimal | None = None
    penalty_currency: str | None = None
    refunded_at: datetime | None = None


class RemoteOrder(ProviderModel):
    """プロバイダ側の注文（予約の正本）"""

    id: str
    booking_reference: str | None = None
    total_amount: Decimal
    total_currency: str
    live_mode: bool = False
    cancelled_at: datetime | None = None
    cancellation: OrderCancellation | None = None
    documents: list[OrderDocument] = Field(default_factory=list)
    payment_status: OrderPaymentStatus = Field(default_factory=OrderPaymentStatus)
    airline_initiated_changes: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("documents", "airline_initiated_changes", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    @field_validator("payment_status", mode="before")
    @classmethod
    def none_to_default(cls, v):
        return v or {}

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled_at is not None or self.cancellation is not None

    @property
    def is_issued(self) -> bool:
        return bool(self.documents)


class CardToken(ProviderModel):
    """カード Vault が発行した一時トークン"""

    id: str
    three_d_secure_usage: str | dict[str, Any] | None = None

    @property
    def requires_three_d_secure(self) -> bool:
        """3DS 要否（文字列 "required" または {"required": true}）"""
        usage = self.three_d_secure_usage
        if isinstance(usage, str):
            return usage == "required"
        if isinstance(usage, dict):
            return bool(usage.get("required"))
        return False


class PaymentIntent(ProviderModel):
    REQUIRES_ACTION: ClassVar[str] = "requires_action"
    SUCCEEDED: ClassVar[str] = "succeeded"

    id: str
    status: str | None = None
    client_token: str | None = None
    amount: Decimal | None = None
    currency: str | None = None

    @property
    def requires_action(self) -> bool:
        return self.status == self.REQUIRES_ACTION


class RemotePayment(ProviderModel):
    id: str
    amount: Decimal | None = None
    currency: str | None = None
    type: str | None = None
