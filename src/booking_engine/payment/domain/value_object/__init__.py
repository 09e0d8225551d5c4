from .card_authorization import CardAuthorization as CardAuthorization
