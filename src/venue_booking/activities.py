"""
Temporal activities: thin wrappers delegating to the service layer.

An **activity** is a single unit of work in a Temporal workflow. Activities are
where side-effects happen: reading discount rules, capturing the payment,
inserting the booking, notifying the customer.

Key points:
  - Decorated with `@activity.defn` so Temporal can discover and invoke them.
  - If an activity raises an exception, Temporal retries it automatically
    according to the RetryPolicy configured in the workflow.
  - Each activity accepts a single Pydantic model as input, serialized via
    pydantic_data_converter.
"""

import logging

from temporalio import activity

from venue_booking.domain.models import (
    ChargeInput,
    NotificationInput,
    PersistBookingInput,
    PricingContext,
    PricingContextInput,
)
from venue_booking.services.factory import ServiceFactory

logger = logging.getLogger(__name__)


@activity.defn
async def load_pricing_context(input: PricingContextInput) -> PricingContext:
    """Fetch the venue record and its active discount rules, newest first."""
    logger.info("Activity load_pricing_context started for venue %s", input.venue_id)
    repo = ServiceFactory.get_discount_repository()
    venue = await repo.get_venue(input.venue_id)
    rules = await repo.list_active_rules(input.venue_id)
    logger.info("Venue %s has %d active discount rules", input.venue_id, len(rules))
    return PricingContext(venue=venue, rules=rules)


@activity.defn
async def charge_customer(input: ChargeInput) -> bool:
    """Capture the quoted amount via PaymentService."""
    logger.info("Activity charge_customer started for booking %s", input.booking_ref)
    result = await ServiceFactory.get_payment_service().charge(input)
    logger.info("Activity charge_customer completed for booking %s", input.booking_ref)
    return result


@activity.defn
async def create_booking(input: PersistBookingInput) -> str:
    """Insert the pending booking row and return its id."""
    logger.info("Activity create_booking started for booking %s", input.booking_ref)
    booking_id = await ServiceFactory.get_booking_service().create(input)
    logger.info("Activity create_booking completed for booking %s", input.booking_ref)
    return booking_id


@activity.defn
async def send_booking_notification(input: NotificationInput) -> bool:
    logger.info("Activity send_booking_notification started for booking %s", input.booking_id)
    return await ServiceFactory.get_notification_service().send_booking_pending(input)
