from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from booking_engine.booking.domain.enum import Gender, PassengerType


@dataclass(frozen=True)
class Passport:
    number: str
    expires_on: date
    issuing_country: str | None = None


@dataclass(frozen=True)
class Passenger:
    """搭乗者

    remote_id はオファー上の搭乗者ID（注文作成時にプロバイダへ渡す）。
    """

    type: PassengerType
    given_name: str
    family_name: str
    gender: Gender
    born_on: date
    middle_name: str | None = None
    passport: Passport | None = None
    email: str | None = None
    phone: str | None = None
    remote_id: str | None = None

    def __post_init__(self) -> None:
        if not self.given_name.strip() or not self.family_name.strip():
            raise ValueError("Passenger name cannot be empty")

    @property
    def full_name(self) -> str:
        names = [self.given_name, self.middle_name, self.family_name]
        return " ".join(n for n in names if n)

    def age_on(self, on: date) -> int:
        """指定日時点の満年齢"""
        had_birthday = (on.month, on.day) >= (self.born_on.month, self.born_on.day)
        return on.year - self.born_on.year - (0 if had_birthday else 1)
