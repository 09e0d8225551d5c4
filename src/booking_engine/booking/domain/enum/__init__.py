from .booking_status import BookingStatus as BookingStatus
from .flight_type import FlightType as FlightType
from .passenger_type import Gender as Gender
from .passenger_type import PassengerType as PassengerType
