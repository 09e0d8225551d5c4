from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BookingConfirmation:
    """予約確定通知の内容"""

    recipient: str
    passenger_name: str
    reference: str
    pnr: str | None
    route: str
    departure_date: str
    total: str
    payment_deadline: str | None = None


class Notifier(ABC):
    """顧客通知のポート"""

    @abstractmethod
    async def send_booking_confirmation(self, message: BookingConfirmation) -> None:
        raise NotImplementedError
