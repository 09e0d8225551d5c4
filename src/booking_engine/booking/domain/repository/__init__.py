from .booking_repository import BookingRepository as BookingRepository
