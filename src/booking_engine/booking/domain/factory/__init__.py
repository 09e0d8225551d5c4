from .booking_factory import BookingDetails as BookingDetails
from .booking_factory import BookingFactory as BookingFactory
from .booking_factory import CardInput as CardInput
from .booking_factory import FlightSummary as FlightSummary
