from .booking_id import BookingId as BookingId
from .booking_reference import BookingReference as BookingReference
from .contact import Contact as Contact
from .flight_details import FlightDetails as FlightDetails
from .flight_details import normalize_route as normalize_route
from .passenger import Passenger as Passenger
from .passenger import Passport as Passport
from .payment_info import BillingAddress as BillingAddress
from .payment_info import PaymentInfo as PaymentInfo
from .pricing import Pricing as Pricing
from .ticket_document import TicketDocument as TicketDocument
