from .booking_events import BookingStatusChanged as BookingStatusChanged
from .booking_events import PaymentAttemptFailed as PaymentAttemptFailed
