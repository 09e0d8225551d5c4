"""搭乗者に関する純粋なビジネスルール

いずれも副作用を持たず、予約処理・照合処理から共通に使われる。
"""

import re
from dataclasses import replace
from datetime import date

from booking_engine.booking.domain.enum import Gender, PassengerType
from booking_engine.booking.domain.exception import PassengerValidationException
from booking_engine.booking.domain.value_object import Contact, Passenger

ADULT_MIN_AGE = 12
CHILD_MIN_AGE = 2

PHONE_MIN_LENGTH = 10
PHONE_MAX_LENGTH = 17
_PHONE_STRIP = re.compile(r"[\s-]")


def classify_age(age: int) -> PassengerType:
    """満年齢から搭乗者区分を判定する"""
    if age >= ADULT_MIN_AGE:
        return PassengerType.ADULT
    if age >= CHILD_MIN_AGE:
        return PassengerType.CHILD
    return PassengerType.INFANT


def validate_passenger_mix(passengers: list[Passenger], today: date) -> None:
    """搭乗者構成を検証する

    - 大人が1名以上いること
    - 幼児（座席なし）は大人の人数以下であること
    - 申告区分が予約日時点の年齢と一致すること
    """
    if not passengers:
        raise PassengerValidationException("At least one passenger is required")

    for index, passenger in enumerate(passengers, start=1):
        if passenger.born_on > today:
            raise PassengerValidationException(
                f"Passenger {index}: date of birth cannot be in the future"
            )
        actual = classify_age(passenger.age_on(today))
        if actual is not passenger.type:
            raise PassengerValidationException(
                f"Passenger {index}: age does not match passenger type "
                f"'{passenger.type.value}' (expected '{actual.value}')"
            )

    adults = sum(1 for p in passengers if p.type is PassengerType.ADULT)
    infants = sum(1 for p in passengers if p.type is PassengerType.INFANT)

    if adults == 0:
        raise PassengerValidationException("At least one adult passenger is required")
    if infants > adults:
        raise PassengerValidationException(
            "Not enough adults for infants. Each infant must travel on an adult's lap."
        )


def derive_title(gender: Gender, age: int) -> str:
    """性別と年齢から敬称を決める（入力された敬称は使わない）"""
    if gender is Gender.MALE:
        return "mr"
    return "ms" if age >= ADULT_MIN_AGE else "miss"


def normalize_phone(phone: str | None) -> str | None:
    """空白・ハイフンを除去し、長さが範囲外なら None を返す"""
    if not phone:
        return None
    cleaned = _PHONE_STRIP.sub("", phone)
    if PHONE_MIN_LENGTH <= len(cleaned) <= PHONE_MAX_LENGTH:
        return cleaned
    return None


def pair_infants(passengers: list[Passenger]) -> dict[str, str]:
    """n 番目の幼児を n 番目の大人に割り当てる（大人ID → 幼児ID）"""
    adults = [p for p in passengers if p.type is PassengerType.ADULT]
    infants = [p for p in passengers if p.type is PassengerType.INFANT]
    if len(infants) > len(adults):
        raise PassengerValidationException(
            "Not enough adults for infants. Each infant must travel on an adult's lap."
        )

    pairs: dict[str, str] = {}
    for adult, infant in zip(adults, infants):
        if not adult.remote_id or not infant.remote_id:
            raise PassengerValidationException(
                "Passengers must be matched to the offer before pairing infants"
            )
        pairs[adult.remote_id] = infant.remote_id
    return pairs


def build_order_passengers(
    passengers: list[Passenger],
    contact: Contact,
    today: date,
    default_country: str = "US",
) -> list[dict]:
    """プロバイダの注文作成 API に渡す搭乗者ペイロードを組み立てる"""
    pairs = pair_infants(passengers)

    payload = []
    for passenger in passengers:
        item: dict = {
            "id": passenger.remote_id,
            "given_name": passenger.given_name,
            "family_name": passenger.family_name,
            "gender": passenger.gender.provider_code,
            "title": derive_title(passenger.gender, passenger.age_on(today)),
            "born_on": passenger.born_on.isoformat(),
            "email": passenger.email or contact.email,
        }

        phone = normalize_phone(passenger.phone or contact.phone)
        if phone:
            item["phone_number"] = phone

        if passenger.passport is not None:
            item["identity_documents"] = [
                {
                    "unique_identifier": passenger.passport.number,
                    "type": "passport",
                    "expires_on": passenger.passport.expires_on.isoformat(),
                    "issuing_country_code": (
                        passenger.passport.issuing_country or default_country
                    ),
                }
            ]

        if passenger.remote_id in pairs:
            item["infant_passenger_id"] = pairs[passenger.remote_id]

        payload.append(item)
    return payload


def assign_offer_passenger_ids(
    passengers: list[Passenger], offer_passengers: list[tuple[str, str | None]]
) -> list[Passenger]:
    """オファー上の搭乗者ID (id, type) を区分ごとの出現順に割り当てる

    すでに ID を持つ搭乗者はそのまま使う。
    """
    if all(p.remote_id for p in passengers):
        return list(passengers)
    if len(passengers) != len(offer_passengers):
        raise PassengerValidationException(
            f"Offer is for {len(offer_passengers)} passenger(s), "
            f"but {len(passengers)} were provided"
        )

    taken = {p.remote_id for p in passengers if p.remote_id}
    available = [item for item in offer_passengers if item[0] not in taken]

    assigned = []
    for passenger in passengers:
        if passenger.remote_id:
            assigned.append(passenger)
            continue
        match = next(
            (
                item
                for item in available
                if item[1] in (passenger.type.provider_type, None)
            ),
            None,
        )
        if match is None:
            raise PassengerValidationException(
                f"No '{passenger.type.value}' passenger available on the offer"
            )
        available.remove(match)
        assigned.append(replace(passenger, remote_id=match[0]))
    return assigned
