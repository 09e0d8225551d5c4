from booking_engine.booking.domain.value_object import PaymentInfo
from booking_engine.payment.domain.exception import (
    CardDataMissingException,
    DecryptionFailedException,
)
from booking_engine.shared.domain.value_object import CardDetails
from booking_engine.shared.utils.card_cipher import CardCipher


class CardDetailsFactory:
    """保存済みカード情報から復号済み CardDetails を生成する"""

    def __init__(self, cipher: CardCipher) -> None:
        self._cipher = cipher

    def create(self, payment_info: PaymentInfo | None) -> CardDetails:
        if payment_info is None or not payment_info.has_card:
            raise CardDataMissingException()

        try:
            number = self._cipher.decrypt(payment_info.card_number)
        except ValueError as e:
            raise DecryptionFailedException() from e
        if not number:
            raise DecryptionFailedException()

        address = payment_info.billing_address
        try:
            return CardDetails.from_expiry(
                number=number,
                expiry_date=payment_info.expiry_date,
                holder_name=payment_info.card_name,
                address_line_1=address.street,
                address_city=address.city,
                address_postal_code=address.zip_code,
                address_country_code=address.country,
            )
        except ValueError as e:
            raise DecryptionFailedException("Stored card data is invalid") from e
