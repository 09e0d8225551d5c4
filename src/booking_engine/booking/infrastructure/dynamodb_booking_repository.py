import os
from datetime import date, datetime
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import (
    BookingStatus,
    FlightType,
    Gender,
    PassengerType,
)
from booking_engine.booking.domain.repository import BookingRepository
from booking_engine.booking.domain.value_object import (
    BillingAddress,
    BookingId,
    BookingReference,
    Contact,
    FlightDetails,
    Passenger,
    Passport,
    PaymentInfo,
    Pricing,
    TicketDocument,
)
from booking_engine.shared.domain import Currency
from booking_engine.shared.domain.exception import (
    DuplicateResourceException,
    OptimisticLockException,
)

LIST_PARTITION = "BOOKINGS"


class DynamoDBBookingRepository(BookingRepository):
    """DynamoDBを使用したBookingRepository の具象実装

    - PK=BOOKING#<reference>, SK=METADATA
    - GSI1: 一覧（新しい順）, GSI2: 予約ID, GSI3: プロバイダ注文ID（疎）
    """

    def __init__(self, table_name: str | None = None, table=None) -> None:
        self.table_name = table_name or os.getenv("TABLE_NAME")
        if table is None:
            table = boto3.resource("dynamodb").Table(self.table_name)
        self.table = table

    def save(self, booking: Booking) -> None:
        """予約をDBに新規保存する（予約番号の重複は DuplicateResourceException）"""
        try:
            self.table.put_item(
                Item=self._to_item(booking),
                ConditionExpression=Attr("PK").not_exists(),
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise DuplicateResourceException(
                    f"Booking reference already exists: {booking.reference}"
                ) from e
            raise

    def find_by_id(self, booking_id: BookingId) -> Booking | None:
        """予約IDで検索"""
        response = self.table.query(
            IndexName="GSI2",
            KeyConditionExpression=Key("GSI2PK").eq(f"BOOKING_ID#{booking_id}"),
            Limit=1,
        )
        items = response.get("Items", [])
        if not items:
            return None
        return self._to_entity(items[0])

    def find_by_order_id(self, order_id: str) -> Booking | None:
        response = self.table.query(
            IndexName="GSI3",
            KeyConditionExpression=Key("GSI3PK").eq(f"ORDER#{order_id}"),
            Limit=1,
        )
        items = response.get("Items", [])
        if not items:
            return None
        return self._to_entity(items[0])

    def find_by_pnr(self, pnr: str) -> list[Booking]:
        """PNR で検索（件数が少ないためスキャン＋フィルタ）"""
        kwargs: dict = {"FilterExpression": Attr("pnr").eq(pnr.upper())}
        bookings = []
        while True:
            response = self.table.scan(**kwargs)
            bookings.extend(self._to_entity(i) for i in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return bookings
            kwargs["ExclusiveStartKey"] = last_key

    def list_recent(self, page: int, limit: int) -> tuple[list[Booking], int]:
        """新しい順に1ページ分を返す（オフセット方式）"""
        offset = (page - 1) * limit
        kwargs: dict = {
            "IndexName": "GSI1",
            "KeyConditionExpression": Key("GSI1PK").eq(LIST_PARTITION),
            "ScanIndexForward": False,
        }

        items: list[dict] = []
        while len(items) < offset + limit:
            response = self.table.query(**kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key

        page_items = items[offset : offset + limit]
        return [self._to_entity(i) for i in page_items], self._count()

    def _count(self) -> int:
        kwargs: dict = {
            "IndexName": "GSI1",
            "KeyConditionExpression": Key("GSI1PK").eq(LIST_PARTITION),
            "Select": "COUNT",
        }
        total = 0
        while True:
            response = self.table.query(**kwargs)
            total += response.get("Count", 0)
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return total
            kwargs["ExclusiveStartKey"] = last_key

    def update(
        self, booking: Booking, expected_status: BookingStatus | None = None
    ) -> None:
        """予約を上書き保存する（expected_status 指定時は楽観ロック）"""
        condition = Attr("PK").exists()
        if expected_status is not None:
            condition = condition & Attr("status").eq(expected_status.value)

        try:
            self.table.put_item(
                Item=self._to_item(booking), ConditionExpression=condition
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise OptimisticLockException(
                    f"Booking status conflict: "
                    f"expected {expected_status.value if expected_status else None}, "
                    f"booking_id={booking.id}"
                ) from e
            raise

    def _to_item(self, booking: Booking) -> dict:
        """ドメインエンティティを DynamoDB アイテムに変換する"""
        item = {
            "PK": f"BOOKING#{booking.reference}",
            "SK": "METADATA",
            "entity_type": "BOOKING",
            "booking_id": str(booking.id),
            "reference": str(booking.reference),
            "offer_id": booking.offer_id,
            "contact": {
                "email": booking.contact.email,
                "phone": booking.contact.phone,
            },
            "passengers": [_passenger_to_item(p) for p in booking.passengers],
            "flight_details": _flight_to_item(booking.flight_details),
            "pricing": {
                "currency": str(booking.pricing.currency),
                "total_amount": booking.pricing.total_amount,
                "markup": booking.pricing.markup,
                "base_amount": booking.pricing.base_amount,
            },
            "payment_info": _payment_to_item(booking.payment_info),
            "status": booking.status.value,
            "order_id": booking.order_id,
            "pnr": booking.pnr,
            "documents": [d.to_dict() for d in booking.documents],
            "retry_count": booking.retry_count,
            "last_retry_at": _to_iso(booking.last_retry_at),
            "admin_notes": booking.admin_notes,
            "payment_deadline": _to_iso(booking.payment_deadline),
            "price_expiry": _to_iso(booking.price_expiry),
            "is_live_mode": booking.is_live_mode,
            "airline_initiated_changes": _to_dynamo(
                booking.airline_initiated_changes
            ),
            "created_at": booking.created_at.isoformat(),
            "updated_at": booking.updated_at.isoformat(),
            "GSI1PK": LIST_PARTITION,
            "GSI1SK": f"{booking.created_at.isoformat()}#{booking.reference}",
            "GSI2PK": f"BOOKING_ID#{booking.id}",
        }
        if booking.order_id:
            item["GSI3PK"] = f"ORDER#{booking.order_id}"
        return item

    def _to_entity(self, item: dict) -> Booking:
        """DynamoDB アイテムをドメインエンティティに変換する"""
        pricing = item["pricing"]
        return Booking(
            id=BookingId(value=item["booking_id"]),
            reference=BookingReference(value=item["reference"]),
            offer_id=item["offer_id"],
            contact=Contact(
                email=item["contact"]["email"], phone=item["contact"]["phone"]
            ),
            passengers=[_passenger_from_item(p) for p in item["passengers"]],
            flight_details=_flight_from_item(item["flight_details"]),
            pricing=Pricing(
                currency=Currency(pricing["currency"]),
                total_amount=Decimal(str(pricing["total_amount"])),
                markup=Decimal(str(pricing.get("markup") or 0)),
                base_amount=(
                    Decimal(str(pricing["base_amount"]))
                    if pricing.get("base_amount") is not None
                    else None
                ),
            ),
            payment_info=_payment_from_item(item.get("payment_info")),
            status=BookingStatus(item["status"]),
            order_id=item.get("order_id"),
            pnr=item.get("pnr"),
            documents=[
                TicketDocument(
                    unique_identifier=d.get("unique_identifier"),
                    type=d.get("type"),
                    url=d.get("url"),
                )
                for d in item.get("documents") or []
            ],
            retry_count=int(item.get("retry_count", 0)),
            last_retry_at=_from_iso(item.get("last_retry_at")),
            admin_notes=list(item.get("admin_notes") or []),
            payment_deadline=_from_iso(item.get("payment_deadline")),
            price_expiry=_from_iso(item.get("price_expiry")),
            is_live_mode=bool(item.get("is_live_mode", False)),
            airline_initiated_changes=item.get("airline_initiated_changes") or {},
            created_at=_from_iso(item["created_at"]),
            updated_at=_from_iso(item.get("updated_at")),
        )


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _from_iso(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _to_dynamo(value):
    """float を Decimal に変換する（boto3 は float を受け付けない）"""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(v) for v in value]
    return value


def _passenger_to_item(passenger: Passenger) -> dict:
    item = {
        "type": passenger.type.value,
        "given_name": passenger.given_name,
        "family_name": passenger.family_name,
        "middle_name": passenger.middle_name,
        "gender": passenger.gender.value,
        "born_on": passenger.born_on.isoformat(),
        "email": passenger.email,
        "phone": passenger.phone,
        "remote_id": passenger.remote_id,
        "passport": None,
    }
    if passenger.passport is not None:
        item["passport"] = {
            "number": passenger.passport.number,
            "expires_on": passenger.passport.expires_on.isoformat(),
            "issuing_country": passenger.passport.issuing_country,
        }
    return item


def _passenger_from_item(item: dict) -> Passenger:
    passport = item.get("passport")
    return Passenger(
        type=PassengerType(item["type"]),
        given_name=item["given_name"],
        family_name=item["family_name"],
        middle_name=item.get("middle_name"),
        gender=Gender(item["gender"]),
        born_on=date.fromisoformat(item["born_on"]),
        email=item.get("email"),
        phone=item.get("phone"),
        remote_id=item.get("remote_id"),
        passport=(
            Passport(
                number=passport["number"],
                expires_on=date.fromisoformat(passport["expires_on"]),
                issuing_country=passport.get("issuing_country"),
            )
            if passport
            else None
        ),
    )


def _flight_to_item(flight: FlightDetails) -> dict:
    return {
        "airline": flight.airline,
        "flight_number": flight.flight_number,
        "route": flight.route,
        "departure_date": flight.departure_date,
        "arrival_date": flight.arrival_date,
        "duration": flight.duration,
        "flight_type": flight.flight_type.value,
        "logo_url": flight.logo_url,
    }


def _flight_from_item(item: dict) -> FlightDetails:
    return FlightDetails(
        airline=item["airline"],
        flight_number=item["flight_number"],
        route=item["route"],
        departure_date=item["departure_date"],
        arrival_date=item["arrival_date"],
        duration=item["duration"],
        flight_type=FlightType(item["flight_type"]),
        logo_url=item.get("logo_url"),
    )


def _payment_to_item(payment: PaymentInfo | None) -> dict | None:
    if payment is None:
        return None
    address = payment.billing_address
    return {
        "card_name": payment.card_name,
        "card_number": payment.card_number,
        "expiry_date": payment.expiry_date,
        "billing_address": {
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "zip_code": address.zip_code,
            "country": address.country,
        },
    }


def _payment_from_item(item: dict | None) -> PaymentInfo | None:
    if not item:
        return None
    address = item.get("billing_address") or {}
    return PaymentInfo(
        card_name=item["card_name"],
        card_number=item["card_number"],
        expiry_date=item["expiry_date"],
        billing_address=BillingAddress(
            street=address.get("street", ""),
            city=address.get("city", ""),
            state=address.get("state", ""),
            zip_code=address.get("zip_code", ""),
            country=address.get("country", ""),
        ),
    )
