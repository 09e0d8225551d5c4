from .currency import Currency as Currency
from .money import Money as Money
from .card_details import CardDetails as CardDetails
