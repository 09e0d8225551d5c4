from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from booking_engine.booking.domain.enum import (
    BookingStatus,
    FlightType,
    Gender,
    PassengerType,
)
from booking_engine.shared.utils.validators import is_valid_email, to_decimal


class ContactRequest(BaseModel):
    """連絡先の入力スキーマ"""

    email: str = Field(..., max_length=254, examples=["traveller@example.com"])
    phone: str = Field(..., min_length=5, max_length=32, examples=["+8801712345678"])

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not is_valid_email(v.strip()):
            raise ValueError("Please enter a valid email address")
        return v.strip().lower()


class PassengerRequest(BaseModel):
    """搭乗者の入力スキーマ（title は受け取っても使用しない）"""

    id: str | None = Field(default=None, description="オファー上の搭乗者ID")
    type: PassengerType
    title: str | None = None
    given_name: str = Field(..., min_length=1, max_length=60)
    middle_name: str | None = Field(default=None, max_length=60)
    family_name: str = Field(..., min_length=1, max_length=60)
    gender: Gender
    born_on: date
    passport_number: str | None = Field(default=None, pattern=r"^[A-Za-z0-9]{6,9}$")
    passport_expiry: date | None = None
    passport_country: str | None = Field(default=None, pattern=r"^[A-Za-z]{2}$")
    email: str | None = None
    phone: str | None = None

    @field_validator("passport_number", "passport_country")
    @classmethod
    def upper(cls, v: str | None) -> str | None:
        return v.upper() if v else v

    @model_validator(mode="after")
    def passport_requires_expiry(self) -> "PassengerRequest":
        if self.passport_number and self.passport_expiry is None:
            raise ValueError("passport_expiry is required with passport_number")
        return self


class FlightDetailsRequest(BaseModel):
    """フライト概要の入力スキーマ"""

    airline: str = Field(..., min_length=1)
    flight_number: str = Field(..., min_length=2, max_length=10, examples=["BG388"])
    route: str = Field(..., min_length=1, examples=["DAC ➝ DXB"])
    departure_date: str
    arrival_date: str
    duration: str = ""
    flight_type: FlightType = FlightType.ONE_WAY
    logo_url: str | None = None


class PricingRequest(BaseModel):
    currency: str = Field(default="USD", pattern=r"^[A-Za-z]{3}$")
    total_amount: Decimal = Field(..., gt=0, description="顧客への請求総額")

    @field_validator("total_amount", mode="before")
    @classmethod
    def convert_total_to_decimal(cls, v):
        """Decimalに変換する"""
        return to_decimal(v)


class BillingAddressRequest(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


class PaymentRequest(BaseModel):
    """カード情報の入力スキーマ（CVV は受け付けない）"""

    card_name: str = Field(..., min_length=1)
    card_number: str = Field(..., pattern=r"^[0-9 \-]{12,23}$")
    expiry_date: str = Field(
        ..., pattern=r"^(0[1-9]|1[0-2])/\d{2}$", examples=["08/28"]
    )
    billing_address: BillingAddressRequest = Field(
        default_factory=BillingAddressRequest
    )


class CreateBookingRequest(BaseModel):
    """予約作成リクエストスキーマ"""

    offer_id: str = Field(..., min_length=1, examples=["off_0000AEdGRhtp5AUUdJqMxo"])
    contact: ContactRequest
    passengers: list[PassengerRequest] = Field(..., min_length=1, max_length=9)
    flight_details: FlightDetailsRequest
    pricing: PricingRequest
    payment: PaymentRequest | None = None


class ListBookingsRequest(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class LookupBookingRequest(BaseModel):
    """公開予約照会リクエストスキーマ"""

    pnr: str = Field(..., min_length=6, max_length=6, examples=["RZPYBT"])
    email: str

    @field_validator("pnr")
    @classmethod
    def upper_pnr(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not is_valid_email(v.strip()):
            raise ValueError("Please enter a valid email address")
        return v.strip().lower()


class OverrideStatusRequest(BaseModel):
    """管理者ステータス上書きリクエストスキーマ"""

    status: BookingStatus
    note: str = Field(..., min_length=1, max_length=500)
