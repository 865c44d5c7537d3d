"""
Temporal worker: polls the booking task queue.

The worker registers the workflows it can execute (ConfirmBookingWorkflow)
and the activities it can run. Multiple workers can poll the same task queue
for horizontal scaling; Temporal delivers each task to exactly one of them.

Run with:
    python -m venue_booking.worker
"""

import asyncio
import logging

from temporalio.client import Client

# The same data_converter must be used on both the worker AND the client,
# otherwise Pydantic models fail to deserialize.
from temporalio.contrib.pydantic import pydantic_data_converter
from temporalio.worker import Worker

from venue_booking import config
from venue_booking.activities import (
    charge_customer,
    create_booking,
    load_pricing_context,
    send_booking_notification,
)
from venue_booking.services.factory import ServiceFactory
from venue_booking.workflows import ConfirmBookingWorkflow


async def run_worker() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    logger = logging.getLogger(__name__)

    # Load the venue data up front so a bad file fails at startup, not mid-checkout.
    ServiceFactory.get_discount_repository()

    client = await Client.connect(config.TEMPORAL_ADDRESS, data_converter=pydantic_data_converter)
    logger.info("Connected to Temporal at %s, starting worker on queue %r", config.TEMPORAL_ADDRESS, config.TASK_QUEUE)

    worker = Worker(
        client,
        task_queue=config.TASK_QUEUE,
        workflows=[ConfirmBookingWorkflow],
        activities=[load_pricing_context, charge_customer, create_booking, send_booking_notification],
    )
    await worker.run()


def main() -> None:
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
