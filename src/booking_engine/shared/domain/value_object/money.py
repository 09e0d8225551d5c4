from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .currency import Currency

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """金額（通貨情報含む）"""

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.formatted_amount} {self.currency}"

    @property
    def formatted_amount(self) -> str:
        """小数点以下2桁の文字列表現（プロバイダ送信用）"""
        return str(self.amount.quantize(_CENTS, rounding=ROUND_HALF_UP))

    @classmethod
    def of(cls, amount: Decimal | str, currency: str) -> Money:
        return cls(Decimal(str(amount)), Currency(currency))
