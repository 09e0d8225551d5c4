from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Currency:
    """通貨コード（ISO 4217 の3文字英字）"""

    PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Z]{3}$")

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.strip().upper()
        if not self.PATTERN.match(normalized):
            raise ValueError(f"Invalid currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    def __str__(self) -> str:
        return self.code

    @classmethod
    def usd(cls) -> Currency:
        """米ドル"""
        return cls("USD")

    @classmethod
    def bdt(cls) -> Currency:
        """バングラデシュ・タカ"""
        return cls("BDT")
