from __future__ import annotations

from dataclasses import dataclass

from booking_engine.shared.provider.models import OrderDocument


@dataclass(frozen=True)
class TicketDocument:
    """発券済みの旅行書類（e-ticket など）"""

    unique_identifier: str | None
    type: str | None
    url: str | None

    @classmethod
    def from_remote(cls, document: OrderDocument) -> TicketDocument:
        return cls(
            unique_identifier=document.unique_identifier,
            type=document.type,
            url=document.url,
        )

    def to_dict(self) -> dict:
        return {
            "unique_identifier": self.unique_identifier,
            "type": self.type,
            "url": self.url,
        }
