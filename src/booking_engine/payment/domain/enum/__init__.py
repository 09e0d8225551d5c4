from .payment_method import CardAction as CardAction
from .payment_method import PaymentMethod as PaymentMethod
