from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from booking_engine.booking.applications.create_booking import BookingResult
from booking_engine.booking.applications.query_bookings import BookingPage
from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.value_object import PaymentInfo
from booking_engine.shared.utils.card_cipher import CardCipher

ENCRYPTED_CARD_LABEL = "**** (Encrypted)"


class SuccessResponse(BaseModel):
    """成功レスポンスモデル"""

    success: bool = True
    data: Any


class BookingCreatedData(BaseModel):
    booking_id: str
    reference: str
    pnr: str | None
    expiry: datetime | None


class PriceBreakdown(BaseModel):
    currency: str
    total_amount: str
    base_amount: str | None
    markup: str


class BookingListItem(BaseModel):
    """一覧表示用の予約データ"""

    booking_id: str
    reference: str
    pnr: str | None
    status: str
    stored_status: str
    lead_passenger: str
    passenger_count: int
    route: str
    airline: str
    departure_date: str
    price: PriceBreakdown
    card: str | None
    payment_deadline: datetime | None
    time_left_seconds: int | None
    ticket_url: str | None
    retry_count: int
    is_live_mode: bool
    created_at: datetime


class PassengerView(BaseModel):
    type: str
    given_name: str
    middle_name: str | None
    family_name: str
    gender: str
    born_on: str


class DocumentView(BaseModel):
    unique_identifier: str | None
    type: str | None
    url: str | None


class BookingDetail(BookingListItem):
    """詳細表示用の予約データ（パスポート番号・CVV は含めない）"""

    offer_id: str
    contact_email: str
    contact_phone: str
    passengers: list[PassengerView]
    flight_details: dict[str, Any]
    documents: list[DocumentView]
    admin_notes: list[str]
    airline_initiated_changes: dict[str, Any]
    price_expiry: datetime | None
    last_retry_at: datetime | None


class BookingStatusView(BaseModel):
    """公開照会用の予約データ（決済情報は含めない）"""

    reference: str
    pnr: str | None
    status: str
    lead_passenger: str
    route: str
    departure_date: str
    payment_deadline: datetime | None
    documents: list[DocumentView]


def mask_card(payment_info: PaymentInfo | None, cipher: CardCipher) -> str | None:
    """カード番号を "**** 1234" 形式で返す（復号できなければ固定表記）"""
    if payment_info is None or not payment_info.has_card:
        return None
    try:
        number = cipher.decrypt(payment_info.card_number)
    except ValueError:
        return ENCRYPTED_CARD_LABEL
    if len(number) < 4:
        return ENCRYPTED_CARD_LABEL
    return f"**** {number[-4:]}"


def _list_fields(booking: Booking, cipher: CardCipher, now: datetime) -> dict:
    time_left = booking.time_left(now)
    issued_url = next((d.url for d in booking.documents if d.url), None)
    pricing = booking.pricing
    return {
        "booking_id": str(booking.id),
        "reference": str(booking.reference),
        "pnr": booking.pnr,
        "status": booking.effective_status(now).value,
        "stored_status": booking.status.value,
        "lead_passenger": booking.lead_passenger.full_name,
        "passenger_count": len(booking.passengers),
        "route": booking.flight_details.route,
        "airline": booking.flight_details.airline,
        "departure_date": booking.flight_details.departure_date,
        "price": PriceBreakdown(
            currency=str(pricing.currency),
            total_amount=str(pricing.total_amount),
            base_amount=(
                str(pricing.base_amount) if pricing.base_amount is not None else None
            ),
            markup=str(pricing.markup),
        ),
        "card": mask_card(booking.payment_info, cipher),
        "payment_deadline": booking.payment_deadline,
        "time_left_seconds": (
            int(time_left.total_seconds()) if time_left is not None else None
        ),
        "ticket_url": issued_url,
        "retry_count": booking.retry_count,
        "is_live_mode": booking.is_live_mode,
        "created_at": booking.created_at,
    }


def _documents(booking: Booking) -> list[DocumentView]:
    return [DocumentView(**d.to_dict()) for d in booking.documents]


def to_created_response(result: BookingResult) -> dict:
    return SuccessResponse(
        data=BookingCreatedData(
            booking_id=result.booking_id,
            reference=result.reference,
            pnr=result.pnr,
            expiry=result.expiry,
        )
    ).model_dump(mode="json")


def to_list_response(page: BookingPage, cipher: CardCipher) -> dict:
    now = datetime.now(timezone.utc)
    items = [BookingListItem(**_list_fields(b, cipher, now)) for b in page.bookings]
    return SuccessResponse(
        data={
            "bookings": [item.model_dump(mode="json") for item in items],
            "pagination": {
                "page": page.page,
                "limit": page.limit,
                "total": page.total,
                "total_pages": page.total_pages,
            },
        }
    ).model_dump(mode="json")


def to_detail_response(booking: Booking, cipher: CardCipher) -> dict:
    now = datetime.now(timezone.utc)
    flight = booking.flight_details
    detail = BookingDetail(
        **_list_fields(booking, cipher, now),
        offer_id=booking.offer_id,
        contact_email=booking.contact.email,
        contact_phone=booking.contact.phone,
        passengers=[
            PassengerView(
                type=p.type.value,
                given_name=p.given_name,
                middle_name=p.middle_name,
                family_name=p.family_name,
                gender=p.gender.value,
                born_on=p.born_on.isoformat(),
            )
            for p in booking.passengers
        ],
        flight_details={
            "airline": flight.airline,
            "flight_number": flight.flight_number,
            "route": flight.route,
            "departure_date": flight.departure_date,
            "arrival_date": flight.arrival_date,
            "duration": flight.duration,
            "flight_type": flight.flight_type.value,
            "logo_url": flight.logo_url,
        },
        documents=_documents(booking),
        admin_notes=booking.admin_notes,
        airline_initiated_changes=booking.airline_initiated_changes,
        price_expiry=booking.price_expiry,
        last_retry_at=booking.last_retry_at,
    )
    return SuccessResponse(data=detail).model_dump(mode="json")


def to_status_response(booking: Booking) -> dict:
    view = BookingStatusView(
        reference=str(booking.reference),
        pnr=booking.pnr,
        status=booking.effective_status().value,
        lead_passenger=booking.lead_passenger.full_name,
        route=booking.flight_details.route,
        departure_date=booking.flight_details.departure_date,
        payment_deadline=booking.payment_deadline,
        documents=_documents(booking),
    )
    return SuccessResponse(data=view).model_dump(mode="json")
