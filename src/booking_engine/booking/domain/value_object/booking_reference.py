from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from datetime import date
from typing import ClassVar


@dataclass(frozen=True)
class BookingReference:
    """社内予約番号

    形式: "<PREFIX>-<YYMMDD>-<NNNN>"（例: "FB-250314-4821"）
    NNNN は 1000〜9999 の乱数。一意性はストア側の条件付き書き込みで保証する。
    """

    PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Z]{2,5}-\d{6}-\d{4}$")

    value: str

    def __post_init__(self) -> None:
        if not self.PATTERN.match(self.value):
            raise ValueError(f"Invalid booking reference: {self.value}")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(
        cls, prefix: str = "FB", today: date | None = None
    ) -> BookingReference:
        """新しい予約番号を生成する"""
        today = today or date.today()
        suffix = 1000 + secrets.randbelow(9000)
        return cls(value=f"{prefix}-{today:%y%m%d}-{suffix}")
