"""
Domain models for venue discounts, booking drafts and price quotes.

All models use Pydantic v2 BaseModel for validation and serialization.
Temporal transmits workflow/activity inputs and outputs as JSON payloads, and
the pydantic_data_converter configured on both client and worker turns them
back into these models.

Discount rules are a tagged union: each kind is its own model and Pydantic
picks the variant from the `kind` field, so a bulk deal never carries a
percentage value and a time-based rule never carries buy/get quantities.
"""

import logging
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

logger = logging.getLogger(__name__)

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
_TIME_RE = re.compile(TIME_PATTERN)

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class DiscountKind(str, Enum):
    """Kinds of venue discount, stored as `discount_type` in the record store."""

    PERCENTAGE = "percentage"
    BULK_DEAL = "bulk_deal"   # buy N units, get M free
    TIME_BASED = "time_based"  # percentage gated by weekday and clock window


class PricingBasis(str, Enum):
    """How a booking draft turns into a base total and a bulk-deal quantity."""

    HOURLY = "hourly"        # unit price x hours, quantity = hours
    PER_GUEST = "per_guest"  # unit price x guests, quantity = guests


class BookingStatus(str, Enum):
    """Terminal status of a booking confirmation workflow."""

    CONFIRMED = "CONFIRMED"   # Charged and persisted as a pending booking
    FAILED = "FAILED"         # An activity failed after exhausting retries
    CANCELLED = "CANCELLED"   # A cancel signal was received before completion
    REJECTED = "REJECTED"     # Booking window has no positive duration


# ── Discount rules ───────────────────────────────────────────────────


class _DiscountBase(BaseModel):
    id: str
    venue_id: str
    title: str
    description: str | None = None
    active: bool = True
    created_at: datetime | None = None


class PercentageDiscount(_DiscountBase):
    kind: Literal["percentage"] = "percentage"
    value: float = 0.0


class BulkDealDiscount(_DiscountBase):
    """Buy `buy_quantity` units, get `get_quantity` free.

    Either quantity may be missing on a half-configured rule; the composer
    skips such rules instead of failing.
    """

    kind: Literal["bulk_deal"] = "bulk_deal"
    buy_quantity: int | None = None
    get_quantity: int | None = None


class TimeBasedDiscount(_DiscountBase):
    kind: Literal["time_based"] = "time_based"
    value: float = 0.0
    valid_days: list[str] | None = None
    valid_start_time: str | None = None
    valid_end_time: str | None = None

    @field_validator("valid_days")
    @classmethod
    def _normalise_days(cls, days: list[str] | None) -> list[str] | None:
        if days is None:
            return None
        return [d.strip().lower() for d in days]

    @field_validator("valid_start_time", "valid_end_time")
    @classmethod
    def _check_time(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        # Postgres `time` columns come back as HH:MM:SS
        if len(value) == 8 and value[5] == ":":
            value = value[:5]
        if not _TIME_RE.match(value):
            raise ValueError(f"expected HH:MM, got {value!r}")
        return value


DiscountRule = Annotated[
    Union[PercentageDiscount, BulkDealDiscount, TimeBasedDiscount],
    Field(discriminator="kind"),
]

_discount_rule_adapter = TypeAdapter(DiscountRule)


def discount_rule_from_record(record: dict[str, Any]) -> DiscountRule | None:
    """Adapt a flat `venue_discounts` row to its discount variant.

    Rows are stored with every optional column present regardless of type.
    Returns None for an unrecognised `discount_type` or a row that fails
    validation, so one bad promotional row never blocks checkout.
    """
    kind = record.get("discount_type")
    if kind not in {k.value for k in DiscountKind}:
        return None

    if record.get("id") is None or record.get("venue_id") is None:
        logger.warning("Skipping discount row without id or venue_id: %r", record)
        return None

    data: dict[str, Any] = {
        "kind": kind,
        "id": str(record["id"]),
        "venue_id": str(record["venue_id"]),
        "title": record.get("title") or "",
        "description": record.get("description"),
        "active": bool(record.get("active", True)),
        "created_at": record.get("created_at"),
    }
    if kind == DiscountKind.BULK_DEAL:
        data["buy_quantity"] = record.get("buy_quantity")
        data["get_quantity"] = record.get("get_quantity")
    else:
        data["value"] = record.get("discount_value") or 0
    if kind == DiscountKind.TIME_BASED:
        data["valid_days"] = record.get("valid_days")
        data["valid_start_time"] = record.get("valid_start_time")
        data["valid_end_time"] = record.get("valid_end_time")
    try:
        return _discount_rule_adapter.validate_python(data)
    except ValidationError as exc:
        logger.warning("Skipping malformed discount %s: %s", record.get("id"), exc.errors())
        return None


# ── Venue, booking draft, quote ──────────────────────────────────────


class Venue(BaseModel):
    """The slice of a venue record the pricing core needs."""

    id: str
    name: str = ""
    default_discount_percentage: float = 0.0
    timezone: str = "UTC"  # IANA zone the venue's discount windows refer to


class BookingDraft(BaseModel):
    """What the booking form (or the confirmation request body) supplies."""

    arrival_time: str = Field(..., pattern=TIME_PATTERN)
    departure_time: str = Field(..., pattern=TIME_PATTERN)
    guests: int = Field(1, ge=1)
    unit_price: float = Field(..., ge=0)
    basis: PricingBasis = PricingBasis.HOURLY


class PriceQuote(BaseModel):
    """Result of folding all active discounts over a base total."""

    final_price: float = Field(..., ge=0)
    savings: float
    applied_discounts: list[str] = Field(default_factory=list)
    original_total: float = 0.0
    quantity: float = 1.0

    @property
    def amount_cents(self) -> int:
        return to_cents(self.final_price)


def to_cents(amount: float) -> int:
    """Round a currency amount to integer cents, half away from zero."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ── Workflow input / output ──────────────────────────────────────────


class BookingRequest(BaseModel):
    """Input to the booking-confirmation workflow.

    `quoted_at` is the instant the customer saw the estimate; when present the
    server evaluates discount activation at that same instant so the charged
    amount matches the displayed one.
    """

    booking_ref: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    user_email: str | None = None
    venue_id: str = Field(..., min_length=1)
    service_id: str | None = None
    booking_date: date
    draft: BookingDraft
    payment_intent_id: str = Field(..., min_length=1)
    quoted_at: datetime | None = None
    expected_total: float | None = None
    special_requests: str | None = None


class BookingState(BaseModel):
    """Mutable state tracked inside the workflow execution."""

    priced: bool = False
    charged: bool = False
    booked: bool = False
    notified: bool = False
    cancelled: bool = False


class BookingResult(BaseModel):
    """Final result returned by the workflow to the client."""

    booking_ref: str
    status: BookingStatus
    booking_id: str | None = None
    quote: PriceQuote | None = None
    charged: bool = False
    notified: bool = False
    message: str = ""


# ── Activity payload models ──────────────────────────────────────────


class PricingContextInput(BaseModel):
    venue_id: str


class PricingContext(BaseModel):
    """Venue record plus its active rules, newest first."""

    venue: Venue
    rules: list[DiscountRule] = Field(default_factory=list)


class ChargeInput(BaseModel):
    booking_ref: str
    payment_intent_id: str
    amount_cents: int = Field(..., ge=0)


class PersistBookingInput(BaseModel):
    booking_ref: str
    user_id: str
    user_email: str | None = None
    venue_id: str
    service_id: str | None = None
    booking_date: date
    booking_time: str
    guest_count: int
    total_price: float
    special_requests: str | None = None
    status: str = "pending"


class NotificationInput(BaseModel):
    user_id: str
    booking_id: str
    venue_name: str
    booking_date: date
