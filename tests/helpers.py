from datetime import datetime

from venue_booking.domain.models import (
    BulkDealDiscount,
    PercentageDiscount,
    TimeBasedDiscount,
)

# 2026-10-16 is a Friday.
FRIDAY = datetime(2026, 10, 16, 12, 0)


def percentage(title: str, value: float, **kwargs) -> PercentageDiscount:
    return PercentageDiscount(id=title, venue_id="v1", title=title, value=value, **kwargs)


def bulk(title: str, buy: int | None, get: int | None, **kwargs) -> BulkDealDiscount:
    return BulkDealDiscount(
        id=title, venue_id="v1", title=title, buy_quantity=buy, get_quantity=get, **kwargs
    )


def time_based(title: str, value: float, **kwargs) -> TimeBasedDiscount:
    return TimeBasedDiscount(id=title, venue_id="v1", title=title, value=value, **kwargs)
