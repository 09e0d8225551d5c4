import asyncio
import os

import boto3

from booking_engine.shared.notification.notifier import BookingConfirmation, Notifier


class SESNotifier(Notifier):
    """Amazon SES を使用した Notifier の具象実装"""

    def __init__(self, sender: str | None = None, client=None) -> None:
        self.sender = sender or os.getenv("NOTIFICATION_SENDER")
        self.client = client or boto3.client("ses")

    async def send_booking_confirmation(self, message: BookingConfirmation) -> None:
        """予約確定メールを送信する（boto3 は同期のためスレッドで実行）"""
        await asyncio.to_thread(
            self.client.send_email,
            Source=self.sender,
            Destination={"ToAddresses": [message.recipient]},
            Message={
                "Subject": {
                    "Data": f"Booking confirmed: {message.pnr or message.reference}",
                    "Charset": "UTF-8",
                },
                "Body": {"Text": {"Data": self._render(message), "Charset": "UTF-8"}},
            },
        )

    @staticmethod
    def _render(message: BookingConfirmation) -> str:
        lines = [
            f"Dear {message.passenger_name},",
            "",
            "Your flight reservation is on hold.",
            f"Booking reference: {message.reference}",
            f"Airline PNR: {message.pnr or 'pending'}",
            f"Route: {message.route}",
            f"Departure: {message.departure_date}",
            f"Total: {message.total}",
        ]
        if message.payment_deadline:
            lines.append(f"Please complete payment before {message.payment_deadline}.")
        return "\n".join(lines)
