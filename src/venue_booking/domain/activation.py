"""
Discount activation: is a rule eligible to apply at a given instant?

Evaluation is pure and takes `now` explicitly. Callers pass the instant the
customer was quoted at (or `workflow.now()` on the server) together with the
venue's timezone, so the browser estimate and the charged amount see the same
weekday and clock time.
"""

from collections.abc import Iterable
from datetime import datetime
from zoneinfo import ZoneInfo

from venue_booking.domain.models import WEEKDAYS, DiscountRule, TimeBasedDiscount


def local_now(now: datetime, timezone: str | None = None) -> datetime:
    """Express `now` in the venue's timezone.

    Naive datetimes are taken to be venue-local already.
    """
    if timezone is None or now.tzinfo is None:
        return now
    return now.astimezone(ZoneInfo(timezone))


def is_discount_active(rule: DiscountRule, now: datetime) -> bool:
    if not rule.active:
        return False

    if isinstance(rule, TimeBasedDiscount):
        current_day = WEEKDAYS[now.weekday()]
        current_time = now.strftime("%H:%M")

        # Empty or missing day list means no day restriction.
        if rule.valid_days and current_day not in rule.valid_days:
            return False

        # Zero-padded HH:MM compares correctly as strings; bounds are inclusive.
        if rule.valid_start_time and rule.valid_end_time:
            if current_time < rule.valid_start_time or current_time > rule.valid_end_time:
                return False

    return True


def active_discounts(
    rules: Iterable[DiscountRule],
    now: datetime,
    timezone: str | None = None,
) -> list[DiscountRule]:
    """Filter `rules` down to those active at `now`, preserving order."""
    moment = local_now(now, timezone)
    return [rule for rule in rules if is_discount_active(rule, moment)]
