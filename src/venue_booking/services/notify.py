"""
Notification service facade.

Simulates writing the "booking submitted" notification for the customer.
In production this would insert into the notifications table that the app
subscribes to in realtime.
"""

import asyncio
import logging

from venue_booking.domain.models import NotificationInput

logger = logging.getLogger(__name__)


class NotificationService:
    """Simulates notifying the customer that a booking awaits approval."""

    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def send_booking_pending(self, input: NotificationInput) -> bool:
        logger.info("Notifying user %s about booking %s", input.user_id, input.booking_id)
        await asyncio.sleep(0.1)  # Simulate network latency
        self.sent.append(
            {
                "user_id": input.user_id,
                "booking_id": input.booking_id,
                "type": "booking_pending",
                "title": "Booking Request Submitted",
                "message": (
                    f"Your booking request for {input.venue_name} on "
                    f"{input.booking_date.isoformat()} has been submitted and is "
                    "awaiting partner approval."
                ),
                "read": False,
            }
        )
        logger.info("Notification sent for booking %s", input.booking_id)
        return True
