from booking_engine.payment.domain.enum import PaymentMethod
from booking_engine.shared.domain.value_object import CardDetails, Money


class PaymentFactory:
    """決済ペイロードファクトリ

    金額は常にプロバイダ注文の total_amount / total_currency を使う。
    """

    def create(
        self,
        amount: Money,
        method: PaymentMethod,
        card: CardDetails | None = None,
        cvv: str | None = None,
    ) -> dict:
        payment: dict = {
            "amount": amount.formatted_amount,
            "currency": str(amount.currency),
            "type": method.value,
        }
        if method is PaymentMethod.CARD:
            if card is None or not cvv:
                raise ValueError("Card details and CVV are required for card payments")
            payment["card_details"] = {
                "number": card.number,
                "cvv": cvv,
                "exp_month": card.expiry_month,
                "exp_year": card.expiry_year,
                "name": card.holder_name,
            }
        return payment
