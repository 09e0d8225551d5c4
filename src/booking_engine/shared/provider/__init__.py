from .exceptions import ProviderError as ProviderError
from .exceptions import ProviderUnavailableError as ProviderUnavailableError
from .models import CardToken as CardToken
from .models import OrderDocument as OrderDocument
from .models import PaymentIntent as PaymentIntent
from .models import RemoteOffer as RemoteOffer
from .models import RemoteOrder as RemoteOrder
from .models import RemotePayment as RemotePayment
from .order_provider import OrderProvider as OrderProvider
