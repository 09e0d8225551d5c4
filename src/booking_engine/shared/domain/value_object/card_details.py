from __future__ import annotations

import re
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CardDetails:
    """復号済みカード情報（メモリ上でのみ保持する）

    repr はカード番号をマスクし、ログや例外メッセージに平文を残さない。
    """

    number: str = field(repr=False)
    expiry_month: str
    expiry_year: str
    holder_name: str
    address_line_1: str = ""
    address_city: str = ""
    address_postal_code: str = ""
    address_country_code: str = ""

    def __post_init__(self) -> None:
        digits = re.sub(r"[\s-]", "", self.number)
        if not digits.isdigit() or not 12 <= len(digits) <= 19:
            raise ValueError("Invalid card number")
        object.__setattr__(self, "number", digits)

    def __repr__(self) -> str:
        return (
            f"CardDetails(number='{self.masked_number}', "
            f"expiry_month='{self.expiry_month}', expiry_year='{self.expiry_year}', "
            f"holder_name='{self.holder_name}')"
        )

    @property
    def last4(self) -> str:
        return self.number[-4:]

    @property
    def masked_number(self) -> str:
        return f"**** {self.last4}"

    @classmethod
    def from_expiry(
        cls, number: str, expiry_date: str, holder_name: str, **address: str
    ) -> CardDetails:
        """MM/YY 形式の有効期限から生成する（年は 20YY に展開）"""
        month, sep, year = expiry_date.partition("/")
        month, year = month.strip(), year.strip()
        if not sep or not month.isdigit() or not year.isdigit():
            raise ValueError("Expiry date must be in MM/YY format")
        if not 1 <= int(month) <= 12:
            raise ValueError("Invalid expiry month")
        if len(year) == 2:
            year = f"20{year}"
        return cls(
            number=number,
            expiry_month=month.zfill(2),
            expiry_year=year,
            holder_name=holder_name,
            **address,
        )
