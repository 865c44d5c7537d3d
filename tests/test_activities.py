from datetime import date

import pytest
from temporalio.testing import ActivityEnvironment

from venue_booking.activities import (
    charge_customer,
    create_booking,
    load_pricing_context,
    send_booking_notification,
)
from venue_booking.domain.models import (
    BulkDealDiscount,
    ChargeInput,
    NotificationInput,
    PersistBookingInput,
    PricingContextInput,
)
from venue_booking.services.discounts import DiscountRepository
from venue_booking.services.factory import ServiceFactory
from venue_booking.services.payment import PaymentError, PaymentService


@pytest.fixture
def env():
    return ActivityEnvironment()


async def test_load_pricing_context(env):
    ServiceFactory._discounts = DiscountRepository(
        [{"id": "v1", "default_discount_percentage": 5}],
        [{"id": "d1", "venue_id": "v1", "discount_type": "bulk_deal",
          "buy_quantity": 2, "get_quantity": 1, "title": "2+1", "active": True}],
    )
    context = await env.run(load_pricing_context, PricingContextInput(venue_id="v1"))
    assert context.venue.default_discount_percentage == 5
    assert len(context.rules) == 1
    assert isinstance(context.rules[0], BulkDealDiscount)


async def test_charge_is_idempotent_per_intent(env):
    ServiceFactory._payment = PaymentService(latency=0)
    charge = ChargeInput(booking_ref="b1", payment_intent_id="pi_1", amount_cents=7200)
    assert await env.run(charge_customer, charge)
    assert await env.run(charge_customer, charge)
    with pytest.raises(PaymentError):
        await env.run(charge_customer, charge.model_copy(update={"amount_cents": 9000}))


async def test_create_booking_returns_same_id_on_retry(env):
    payload = PersistBookingInput(
        booking_ref="b1",
        user_id="u1",
        venue_id="v1",
        booking_date=date(2026, 10, 16),
        booking_time="18:00",
        guest_count=2,
        total_price=72.0,
    )
    first = await env.run(create_booking, payload)
    second = await env.run(create_booking, payload)
    assert first == second
    stored = ServiceFactory.get_booking_service().bookings[first]
    assert stored["status"] == "pending"
    assert stored["total_price"] == 72.0


async def test_send_booking_notification(env):
    sent = await env.run(
        send_booking_notification,
        NotificationInput(user_id="u1", booking_id="bk1", venue_name="Arena", booking_date=date(2026, 10, 16)),
    )
    assert sent
    [note] = ServiceFactory.get_notification_service().sent
    assert note["type"] == "booking_pending"
    assert "Arena on 2026-10-16" in note["message"]
