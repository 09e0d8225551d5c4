from .card_details_factory import CardDetailsFactory as CardDetailsFactory
from .payment_factory import PaymentFactory as PaymentFactory
