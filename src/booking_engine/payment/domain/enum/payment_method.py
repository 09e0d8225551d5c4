from enum import Enum


class PaymentMethod(str, Enum):
    """決済手段

    - BALANCE: 代理店のプロバイダ残高から支払う
    - CARD: 顧客カードで支払う
    """

    BALANCE = "balance"
    CARD = "card"


class CardAction(str, Enum):
    """トークン化後にクライアントが取るべき次のアクション"""

    PROCEED_TO_PAY = "PROCEED_TO_PAY"
    SHOW_3DS_CHALLENGE = "SHOW_3DS_CHALLENGE"
