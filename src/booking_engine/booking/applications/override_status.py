from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.enum import BookingStatus
from booking_engine.booking.domain.exception import BookingNotFoundException
from booking_engine.booking.domain.repository import BookingRepository
from booking_engine.booking.domain.value_object import BookingId
from booking_engine.shared.utils.logger import get_logger, log_domain_events

logger = get_logger()


class OverrideStatusService:
    """管理者によるステータス上書きユースケース"""

    def __init__(self, repository: BookingRepository) -> None:
        self._repository = repository

    def override(
        self, booking_id: BookingId, status: BookingStatus, note: str
    ) -> Booking:
        booking = self._repository.find_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundException(f"Booking not found: {booking_id}")

        expected_status = booking.status
        booking.override_status(status, note)
        self._repository.update(booking, expected_status=expected_status)

        logger.info(
            "Booking status overridden",
            extra={
                "booking_id": str(booking.id),
                "from_status": expected_status.value,
                "to_status": status.value,
            },
        )
        log_domain_events(logger, booking)
        return booking
