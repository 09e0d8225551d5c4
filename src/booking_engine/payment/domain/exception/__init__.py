from .exceptions import CardDataMissingException as CardDataMissingException
from .exceptions import DecryptionFailedException as DecryptionFailedException
from .exceptions import (
    IntentCreationFailedException as IntentCreationFailedException,
)
from .exceptions import OrderCancelledException as OrderCancelledException
from .exceptions import PaymentFailedException as PaymentFailedException
from .exceptions import (
    RetryLimitExceededException as RetryLimitExceededException,
)
from .exceptions import (
    TokenizationFailedException as TokenizationFailedException,
)
from .exceptions import (
    VaultFeatureUnavailableException as VaultFeatureUnavailableException,
)
