from .notifier import BookingConfirmation as BookingConfirmation
from .notifier import Notifier as Notifier
