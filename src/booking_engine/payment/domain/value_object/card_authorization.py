from dataclasses import dataclass

from booking_engine.payment.domain.enum import CardAction


@dataclass(frozen=True)
class CardAuthorization:
    """トークン化の結果"""

    action: CardAction
    card_token: str
    challenge_client_token: str | None = None
    payment_intent_id: str | None = None

    def to_dict(self) -> dict:
        result = {"action": self.action.value, "card_token": self.card_token}
        if self.action is CardAction.SHOW_3DS_CHALLENGE:
            result["challenge_client_token"] = self.challenge_client_token
            result["payment_intent_id"] = self.payment_intent_id
        return result
