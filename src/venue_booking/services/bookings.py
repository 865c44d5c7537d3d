"""
Booking store facade.

Simulates inserting the booking row. The row is created `pending` and a venue
partner approves or declines it later. Inserts are keyed by booking_ref so a
retried activity returns the booking it already created.
"""

import logging
import uuid

from venue_booking.domain.models import PersistBookingInput

logger = logging.getLogger(__name__)


class BookingService:
    """In-memory `bookings` table."""

    def __init__(self) -> None:
        self.bookings: dict[str, dict] = {}
        self._by_ref: dict[str, str] = {}

    async def create(self, input: PersistBookingInput) -> str:
        existing = self._by_ref.get(input.booking_ref)
        if existing is not None:
            logger.info("Booking %s already stored as %s", input.booking_ref, existing)
            return existing

        booking_id = str(uuid.uuid4())
        self.bookings[booking_id] = {"id": booking_id, **input.model_dump(mode="json")}
        self._by_ref[input.booking_ref] = booking_id
        logger.info(
            "Created %s booking %s at venue %s for %.2f",
            input.status,
            booking_id,
            input.venue_id,
            input.total_price,
        )
        return booking_id
