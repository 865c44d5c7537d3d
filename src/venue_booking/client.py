"""
CLI client: shows the price estimate for a booking and confirms it.

The estimate is computed locally with the same pricing strategy the workflow
uses, against the venue data file, and stamped with the instant it was made.
That instant travels with the booking request so the server evaluates
time-based discounts at the same moment.

Usage:
    # Estimate only:
    python -m venue_booking.client --venue-id v1 --arrival 18:00 --departure 20:00 \
        --unit-price 30 --estimate-only

    # Estimate, then confirm and query the workflow:
    python -m venue_booking.client --venue-id v1 --arrival 18:00 --departure 20:00 \
        --unit-price 30 --guests 2 --user-id u1 --payment-intent pi_123 --query
"""

import argparse
import asyncio
import logging
import uuid
from datetime import date, datetime, timezone

from temporalio.client import Client

# Must match the data_converter used by the worker; see worker.py.
from temporalio.contrib.pydantic import pydantic_data_converter

from venue_booking import config
from venue_booking.domain.models import BookingDraft, BookingRequest, PricingBasis, PriceQuote
from venue_booking.domain.pricing import DiscountPricingStrategy, require_positive_duration
from venue_booking.services.factory import ServiceFactory
from venue_booking.workflows import ConfirmBookingWorkflow


async def estimate(venue_id: str, draft: BookingDraft, now: datetime) -> PriceQuote:
    repo = ServiceFactory.get_discount_repository()
    venue = await repo.get_venue(venue_id)
    rules = await repo.list_active_rules(venue_id)
    return DiscountPricingStrategy().quote(draft, venue, rules, now)


async def run_client(args: argparse.Namespace) -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    logger = logging.getLogger(__name__)

    draft = BookingDraft(
        arrival_time=args.arrival,
        departure_time=args.departure,
        guests=args.guests,
        unit_price=args.unit_price,
        basis=PricingBasis(args.basis),
    )
    # Same check the booking form applies before enabling submission.
    require_positive_duration(draft)

    quoted_at = datetime.now(timezone.utc)
    quote = await estimate(args.venue_id, draft, quoted_at)
    print(quote.model_dump_json(indent=2))
    if args.estimate_only:
        return

    client = await Client.connect(config.TEMPORAL_ADDRESS, data_converter=pydantic_data_converter)

    req = BookingRequest(
        booking_ref=args.booking_ref or uuid.uuid4().hex,
        user_id=args.user_id,
        user_email=args.user_email,
        venue_id=args.venue_id,
        service_id=args.service_id,
        booking_date=date.fromisoformat(args.date) if args.date else quoted_at.date(),
        draft=draft,
        payment_intent_id=args.payment_intent,
        quoted_at=quoted_at,
        expected_total=quote.final_price,
        special_requests=args.special_requests,
    )
    workflow_id = f"booking-{req.booking_ref}"
    logger.info("Starting workflow %s", workflow_id)

    handle = await client.start_workflow(
        ConfirmBookingWorkflow.run,
        req,
        id=workflow_id,            # unique per booking (prevents double charges)
        task_queue=config.TASK_QUEUE,
    )

    if args.query:
        status = await handle.query(ConfirmBookingWorkflow.get_status)
        logger.info("Query result: %s", status)

    if args.cancel_after is not None:
        await asyncio.sleep(args.cancel_after)
        logger.info("Sending cancel signal to %s", workflow_id)
        await handle.signal(ConfirmBookingWorkflow.cancel_booking)

    result = await handle.result()
    print(result.model_dump_json(indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Price and confirm a venue booking via Temporal")
    parser.add_argument("--venue-id", required=True, help="Venue identifier")
    parser.add_argument("--arrival", required=True, help="Arrival time, HH:MM")
    parser.add_argument("--departure", required=True, help="Departure time, HH:MM (same day)")
    parser.add_argument("--unit-price", required=True, type=float, help="Price per hour or per guest")
    parser.add_argument("--guests", type=int, default=1, help="Number of guests")
    parser.add_argument("--basis", choices=[b.value for b in PricingBasis], default=PricingBasis.HOURLY.value)
    parser.add_argument("--date", default=None, help="Booking date, YYYY-MM-DD (default: today)")
    parser.add_argument("--estimate-only", action="store_true", help="Print the estimate and exit")
    parser.add_argument("--booking-ref", default=None, help="Idempotency key for the booking")
    parser.add_argument("--user-id", default="anonymous", help="Customer identifier")
    parser.add_argument("--user-email", default=None)
    parser.add_argument("--service-id", default=None)
    parser.add_argument("--payment-intent", default="pi_demo", help="Card provider payment intent id")
    parser.add_argument("--special-requests", default=None)
    parser.add_argument("--query", action="store_true", help="Query workflow status once after starting")
    parser.add_argument("--cancel-after", type=float, default=None, help="Seconds to wait before sending cancel signal")
    asyncio.run(run_client(parser.parse_args()))


if __name__ == "__main__":
    main()
