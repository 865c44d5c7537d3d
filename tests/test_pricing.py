from datetime import datetime, timezone

import pytest

from helpers import FRIDAY, bulk, percentage, time_based
from venue_booking.domain.models import BookingDraft, PricingBasis, Venue
from venue_booking.domain.pricing import (
    DiscountPricingStrategy,
    InvalidBookingDuration,
    booking_hours,
    compose_price,
    require_positive_duration,
)


def test_no_discounts_is_identity():
    quote = compose_price(120.0, 0, [], 3)
    assert quote.final_price == 120.0
    assert quote.savings == 0
    assert quote.applied_discounts == []


def test_default_then_percentage():
    quote = compose_price(100, 10, [percentage("Happy Hour", 20)], 1)
    assert quote.final_price == pytest.approx(72)
    assert quote.savings == pytest.approx(28)
    assert quote.applied_discounts == ["10% default discount", "Happy Hour"]


def test_default_label_keeps_fractional_percent():
    quote = compose_price(200, 12.5, [])
    assert quote.applied_discounts == ["12.5% default discount"]
    assert quote.final_price == pytest.approx(175)
    assert compose_price(100, 33.3333333, []).applied_discounts == ["33.3333333% default discount"]
    assert compose_price(100, 10.0, []).applied_discounts == ["10% default discount"]


def test_percentages_stack_on_running_price():
    quote = compose_price(100, 0, [percentage("a", 10), percentage("b", 25)])
    assert quote.final_price == pytest.approx(100 * 0.9 * 0.75)
    swapped = compose_price(100, 0, [percentage("b", 25), percentage("a", 10)])
    assert swapped.final_price == pytest.approx(quote.final_price)
    assert swapped.savings == pytest.approx(quote.savings)


def test_time_based_rule_applies_like_percentage():
    quote = compose_price(100, 0, [time_based("Evening", 30, valid_days=["friday"])])
    assert quote.final_price == pytest.approx(70)
    assert quote.applied_discounts == ["Evening"]


@pytest.mark.parametrize(
    "quantity, applied, free_units",
    [(1, False, 0), (2, True, 1), (5, True, 2)],
)
def test_bulk_deal_threshold(quantity, applied, free_units):
    quote = compose_price(10.0, 0, [bulk("2+1", 2, 1)], quantity)
    assert ("2+1" in quote.applied_discounts) is applied
    # Free units are valued at the running price, which is still 10 here.
    assert quote.savings == pytest.approx(free_units * 10.0)


def test_bulk_deal_values_free_units_at_running_total():
    quote = compose_price(90, 0, [bulk("3for2", 3, 1)], 3)
    assert quote.savings == pytest.approx(90)
    assert quote.final_price == pytest.approx((90 * 3 - 90) / 3)
    assert quote.applied_discounts == ["3for2"]


def test_bulk_deal_free_units_capped_at_quantity():
    quote = compose_price(40, 0, [bulk("greedy", 1, 5)], 2)
    assert quote.savings == pytest.approx(2 * 40)
    assert quote.final_price == 0


def test_bulk_and_percentage_order_changes_savings():
    pct_first = compose_price(100, 0, [percentage("half", 50), bulk("2+1", 2, 1)], 2)
    bulk_first = compose_price(100, 0, [bulk("2+1", 2, 1), percentage("half", 50)], 2)

    assert pct_first.final_price == pytest.approx(25)
    assert pct_first.savings == pytest.approx(50 + 50)
    assert bulk_first.final_price == pytest.approx(25)
    assert bulk_first.savings == pytest.approx(100 + 25)
    assert pct_first.applied_discounts == ["half", "2+1"]
    assert bulk_first.applied_discounts == ["2+1", "half"]


@pytest.mark.parametrize("buy, get", [(None, 1), (2, None), (0, 1), (2, 0)])
def test_incomplete_bulk_deal_is_skipped(buy, get):
    quote = compose_price(50, 0, [bulk("broken", buy, get), percentage("ok", 10)], 4)
    assert quote.applied_discounts == ["ok"]
    assert quote.final_price == pytest.approx(45)


def test_unknown_rule_objects_are_ignored():
    quote = compose_price(50, 0, [object(), percentage("ok", 10)], 1)
    assert quote.applied_discounts == ["ok"]


def test_final_price_is_clamped_but_savings_are_not():
    quote = compose_price(100, 60, [percentage("too much", 150)])
    assert quote.final_price == 0
    assert quote.savings == pytest.approx(60 + 40 * 1.5)


def test_never_exceeds_original_total():
    rules = [percentage("a", 5), bulk("b", 2, 1), time_based("c", 15)]
    for total in (0, 1, 33.3, 250):
        for quantity in (1, 2, 3.5, 7):
            quote = compose_price(total, 10, rules, quantity)
            assert 0 <= quote.final_price <= total


def test_booking_hours_allows_fractions():
    assert booking_hours("18:00", "19:30") == 1.5
    assert booking_hours("09:15", "09:35") == pytest.approx(1 / 3)


@pytest.mark.parametrize("arrival, departure", [("20:00", "20:00"), ("23:00", "01:00")])
def test_non_positive_duration_is_rejected(arrival, departure):
    draft = BookingDraft(arrival_time=arrival, departure_time=departure, unit_price=20)
    with pytest.raises(InvalidBookingDuration):
        require_positive_duration(draft)


def test_strategy_prices_hourly_bookings_by_duration():
    venue = Venue(id="v1", default_discount_percentage=0)
    draft = BookingDraft(arrival_time="18:00", departure_time="20:30", guests=3, unit_price=30)
    quote = DiscountPricingStrategy().quote(draft, venue, [], FRIDAY)
    assert quote.original_total == pytest.approx(75)
    assert quote.quantity == pytest.approx(2.5)


def test_strategy_prices_services_per_guest():
    venue = Venue(id="v1", default_discount_percentage=20)
    draft = BookingDraft(
        arrival_time="10:00",
        departure_time="11:00",
        guests=4,
        unit_price=25,
        basis=PricingBasis.PER_GUEST,
    )
    quote = DiscountPricingStrategy().quote(draft, venue, [bulk("4for3", 4, 1)], FRIDAY)
    assert quote.original_total == 100
    assert quote.quantity == 4
    assert quote.applied_discounts == ["20% default discount", "4for3"]
    assert quote.final_price == pytest.approx((80 * 4 - 80) / 4)


def test_strategy_filters_inactive_rules_in_venue_time():
    venue = Venue(id="v1", timezone="Asia/Tbilisi")
    draft = BookingDraft(arrival_time="18:00", departure_time="19:00", unit_price=40)
    happy_hour = time_based("Happy Hour", 25, valid_start_time="12:00", valid_end_time="16:00")

    # 10:00 UTC is 14:00 in Tbilisi
    inside = datetime(2026, 10, 16, 10, 0, tzinfo=timezone.utc)
    outside = datetime(2026, 10, 16, 13, 0, tzinfo=timezone.utc)
    strategy = DiscountPricingStrategy()

    assert strategy.quote(draft, venue, [happy_hour], inside).final_price == pytest.approx(30)
    assert strategy.quote(draft, venue, [happy_hour], outside).final_price == pytest.approx(40)


def test_amount_cents_rounds_half_up():
    quote = compose_price(100, 10, [percentage("Happy Hour", 20)])
    assert quote.amount_cents == 7200
    assert compose_price(0.125, 0, []).amount_cents == 13
