from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal

from booking_engine.shared.domain.value_object import Currency, Money

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Pricing:
    """価格内訳

    markup = total_amount - base_amount。base_amount はプロバイダ注文の実費で、
    顧客入力からは決して算出しない。
    """

    currency: Currency
    total_amount: Decimal
    markup: Decimal = Decimal("0")
    base_amount: Decimal | None = None

    def __post_init__(self) -> None:
        if self.total_amount < 0:
            raise ValueError("Total amount cannot be negative")

    @property
    def total(self) -> Money:
        return Money(self.total_amount, self.currency)

    def with_base_amount(self, base_amount: Decimal) -> Pricing:
        """プロバイダ実費を反映し、マークアップを確定する"""
        markup = (self.total_amount - base_amount).quantize(
            _CENTS, rounding=ROUND_HALF_UP
        )
        return replace(self, base_amount=base_amount, markup=markup)
