from .enum import CardAction as CardAction
from .enum import PaymentMethod as PaymentMethod
from .factory import CardDetailsFactory as CardDetailsFactory
from .factory import PaymentFactory as PaymentFactory
from .value_object import CardAuthorization as CardAuthorization
