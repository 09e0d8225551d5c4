from dataclasses import dataclass


@dataclass(frozen=True)
class BillingAddress:
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


@dataclass(frozen=True)
class PaymentInfo:
    """保存用カード情報

    card_number は暗号文のみ。CVV は保持しない。
    """

    card_name: str
    card_number: str
    expiry_date: str
    billing_address: BillingAddress = BillingAddress()

    @property
    def has_card(self) -> bool:
        return bool(self.card_number)
