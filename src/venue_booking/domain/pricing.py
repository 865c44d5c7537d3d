"""
Pricing strategies (Strategy pattern) and the discount fold they share.

The booking form and the confirmation workflow both hold a `PricingStrategy`
and call `quote()`. Because the same strategy runs on both sides with the same
inputs, the customer is charged exactly what they were shown.

IMPORTANT: Pricing runs directly inside the workflow (not in an activity),
so it MUST be deterministic: no I/O, no randomness, no system clock. The
evaluation instant is always passed in.
"""

import math
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from venue_booking.domain.activation import active_discounts
from venue_booking.domain.models import (
    BookingDraft,
    BulkDealDiscount,
    DiscountRule,
    PercentageDiscount,
    PriceQuote,
    PricingBasis,
    TimeBasedDiscount,
    Venue,
)


class InvalidBookingDuration(ValueError):
    """Departure is not after arrival on the same day."""


def _minutes(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


def booking_hours(arrival_time: str, departure_time: str) -> float:
    """Hours between two same-day HH:MM clock times.

    Overnight spans come out negative; callers reject them.
    """
    return (_minutes(departure_time) - _minutes(arrival_time)) / 60


def require_positive_duration(draft: BookingDraft) -> float:
    hours = booking_hours(draft.arrival_time, draft.departure_time)
    if hours <= 0:
        raise InvalidBookingDuration(
            f"Departure {draft.departure_time} must be after arrival {draft.arrival_time}"
        )
    return hours


def _percent_label(percent: float) -> str:
    """Whole percentages print without a trailing `.0`; fractions print in full."""
    return str(int(percent)) if float(percent).is_integer() else str(percent)


def compose_price(
    original_total: float,
    default_discount_percent: float,
    active_rules: Iterable[DiscountRule],
    quantity: float = 1,
) -> PriceQuote:
    """Fold the default discount and then each active rule over `original_total`.

    Rules are applied in the order given, each on the already-discounted
    running price. `active_rules` must already be filtered for activation.
    Rules missing the fields their kind needs are skipped, never raised.

    Bulk deals value each free unit at the running price as it stands at that
    point of the fold (not divided by quantity first).
    """
    final_price = original_total
    savings = 0.0
    applied: list[str] = []

    if default_discount_percent > 0:
        default_savings = original_total * default_discount_percent / 100
        final_price -= default_savings
        savings += default_savings
        applied.append(f"{_percent_label(default_discount_percent)}% default discount")

    for rule in active_rules:
        if isinstance(rule, (PercentageDiscount, TimeBasedDiscount)):
            rule_savings = final_price * rule.value / 100
            final_price -= rule_savings
            savings += rule_savings
            applied.append(rule.title)
        elif isinstance(rule, BulkDealDiscount):
            buy, get = rule.buy_quantity, rule.get_quantity
            if not buy or not get or buy <= 0 or get <= 0:
                continue
            if quantity >= buy:
                free_units = math.floor(quantity / buy) * get
                unit_price = final_price
                bulk_savings = min(free_units, quantity) * unit_price
                final_price = max(0.0, final_price * quantity - bulk_savings) / quantity
                savings += bulk_savings
                applied.append(rule.title)

    return PriceQuote(
        final_price=max(0.0, final_price),
        savings=savings,
        applied_discounts=applied,
        original_total=original_total,
        quantity=quantity,
    )


class PricingStrategy(Protocol):
    """Interface for quoting a booking draft.

    Any class with a matching `quote()` method satisfies this protocol
    (structural subtyping, no explicit inheritance needed).
    """

    def quote(
        self,
        draft: BookingDraft,
        venue: Venue,
        rules: Iterable[DiscountRule],
        now: datetime,
    ) -> PriceQuote: ...


class DiscountPricingStrategy:
    """Default pricing: base total from the draft, then the discount fold.

    Examples (no discounts):
        - Hourly, 30/h, 18:00-20:30:   30 x 2.5  = 75.00, quantity 2.5
        - Per guest, 25, 4 guests:    25 x 4    = 100.00, quantity 4
    """

    def base_total(self, draft: BookingDraft) -> tuple[float, float]:
        """Return `(original_total, quantity)` for the draft's pricing basis."""
        if draft.basis == PricingBasis.PER_GUEST:
            quantity = float(draft.guests)
        else:
            quantity = require_positive_duration(draft)
        return draft.unit_price * quantity, quantity

    def quote(
        self,
        draft: BookingDraft,
        venue: Venue,
        rules: Iterable[DiscountRule],
        now: datetime,
    ) -> PriceQuote:
        original_total, quantity = self.base_total(draft)
        active = active_discounts(rules, now, venue.timezone)
        return compose_price(
            original_total,
            venue.default_discount_percentage,
            active,
            quantity,
        )
