"""
Payment service facade.

Part of the **service layer** that encapsulates external operations behind
clean interfaces. In production this would retrieve the card provider's
payment intent and capture the quoted amount. Here it simulates the call
with a short sleep.

Activities delegate to services (not the other way around), keeping the
Temporal-specific code separate from business logic.
"""

import asyncio
import logging

from venue_booking.domain.models import ChargeInput

logger = logging.getLogger(__name__)


class PaymentError(RuntimeError):
    """The provider refused the charge."""


class PaymentService:
    """Simulates capturing a payment intent for the quoted amount.

    Failures raised here propagate up through the activity and are retried
    by Temporal.
    """

    def __init__(self, latency: float = 0.5) -> None:
        self.latency = latency
        self.captured: dict[str, int] = {}

    async def charge(self, input: ChargeInput) -> bool:
        logger.info(
            "Charging booking %s (intent %s) for %d cents",
            input.booking_ref,
            input.payment_intent_id,
            input.amount_cents,
        )
        await asyncio.sleep(self.latency)  # Simulate network latency
        previous = self.captured.get(input.payment_intent_id)
        if previous is not None and previous != input.amount_cents:
            raise PaymentError(
                f"Intent {input.payment_intent_id} already captured for {previous} cents"
            )
        self.captured[input.payment_intent_id] = input.amount_cents
        logger.info("Charge successful for booking %s", input.booking_ref)
        return True
