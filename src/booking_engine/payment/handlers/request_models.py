from pydantic import BaseModel, Field

from booking_engine.payment.domain.enum import PaymentMethod


class TokenizeCardRequest(BaseModel):
    """カードトークン化リクエストスキーマ"""

    cvv: str = Field(
        ..., pattern=r"^\d{3,4}$", description="カード裏面のセキュリティコード"
    )
    multi_use: bool = False


class IssueTicketRequest(BaseModel):
    """発券リクエストスキーマ"""

    payment_method: PaymentMethod = Field(
        ...,
        description="決済手段（balance / card）",
        examples=["card", "balance"],
    )
    cvv: str | None = Field(default=None, pattern=r"^\d{3,4}$")
