from .exceptions import BookingNotFoundException as BookingNotFoundException
from .exceptions import (
    InstantPaymentRequiredException as InstantPaymentRequiredException,
)
from .exceptions import InvalidWebhookException as InvalidWebhookException
from .exceptions import OfferExpiredException as OfferExpiredException
from .exceptions import (
    OrderCreationFailedException as OrderCreationFailedException,
)
from .exceptions import (
    PassengerValidationException as PassengerValidationException,
)
