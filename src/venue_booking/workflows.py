"""
Temporal workflow: ConfirmBookingWorkflow.

The server-side half of checkout. The customer has already seen an estimate
produced by the same pricing strategy; this workflow re-derives the price
from the stored rules, charges that amount, and records a pending booking
for the venue partner to approve.

Key constraints inside a workflow:
  - Must be **deterministic**: no I/O, no randomness, no system clock.
    (Use activities for side-effects; use `workflow.now()` for time.)
  - Use `workflow.logger` instead of the stdlib `logging` module.
"""

from datetime import datetime, timedelta, timezone

from temporalio import workflow
from temporalio.common import RetryPolicy

# Pydantic, zoneinfo lookups and our own modules are passed through the
# sandbox's import interception. They are only used for data modelling and
# deterministic computation.
with workflow.unsafe.imports_passed_through():
    from venue_booking.activities import (
        charge_customer,
        create_booking,
        load_pricing_context,
        send_booking_notification,
    )
    from venue_booking.domain.models import (
        BookingRequest,
        BookingResult,
        BookingState,
        BookingStatus,
        ChargeInput,
        NotificationInput,
        PersistBookingInput,
        PriceQuote,
        PricingContextInput,
    )
    from venue_booking.domain.pricing import (
        DiscountPricingStrategy,
        InvalidBookingDuration,
        PricingStrategy,
        require_positive_duration,
    )

# Quotes that differ by at least a cent are reported.
QUOTE_TOLERANCE = 0.005

# Oldest client estimate whose instant the server still honours.
QUOTE_MAX_AGE = timedelta(minutes=15)

# Failures that no amount of retrying can fix.
NON_RETRYABLE_ERRORS = ["VenueNotFoundError", "PaymentError"]


def evaluation_instant(quoted_at: datetime | None, now: datetime) -> tuple[datetime, bool]:
    """Pick the instant discount activation is evaluated at.

    The client's `quoted_at` is used only when it is not in the future and at
    most QUOTE_MAX_AGE old; otherwise `now`. Returns the instant and whether
    the client's instant was honoured. Naive instants are taken as UTC.
    """
    if quoted_at is None:
        return now, False
    if quoted_at.tzinfo is None:
        quoted_at = quoted_at.replace(tzinfo=timezone.utc)
    if quoted_at > now or now - quoted_at > QUOTE_MAX_AGE:
        return now, False
    return quoted_at, True


def quote_mismatch(expected_total: float | None, final_price: float) -> bool:
    return expected_total is not None and abs(expected_total - final_price) >= QUOTE_TOLERANCE


@workflow.defn
class ConfirmBookingWorkflow:
    """Orchestrates confirmation of a paid booking.

    Execution flow:
        1. Validate the booking window (arrival before departure)
        2. load_pricing_context activity   → DiscountRepository
        3. Quote (deterministic, in-workflow)
        4. charge_customer activity        → PaymentService
        5. create_booking activity         → BookingService
        6. send_booking_notification       → NotificationService (best effort)

    Supports:
        - **Signal** `cancel_booking`: stops the workflow before the next step.
        - **Query** `get_status`: inspect progress without affecting it.
    """

    def __init__(self) -> None:
        self.state = BookingState()
        self.pricing: PricingStrategy = DiscountPricingStrategy()
        self.request: BookingRequest | None = None
        self.quote: PriceQuote | None = None
        self.booking_id: str | None = None

    @workflow.signal
    async def cancel_booking(self) -> None:
        self.state.cancelled = True

    @workflow.query
    def get_status(self) -> dict:
        return {
            "cancelled": self.state.cancelled,
            "priced": self.state.priced,
            "charged": self.state.charged,
            "booked": self.state.booked,
            "notified": self.state.notified,
            "final_price": self.quote.final_price if self.quote else None,
            "booking_id": self.booking_id,
            "booking_ref": self.request.booking_ref if self.request else None,
        }

    def _result(self, status: BookingStatus, message: str = "") -> BookingResult:
        """Build a BookingResult snapshot from current state."""
        return BookingResult(
            booking_ref=self.request.booking_ref if self.request else "",
            status=status,
            booking_id=self.booking_id,
            quote=self.quote,
            charged=self.state.charged,
            notified=self.state.notified,
            message=message,
        )

    @workflow.run
    async def run(self, req: BookingRequest) -> BookingResult:
        self.request = req

        try:
            require_positive_duration(req.draft)
        except InvalidBookingDuration as exc:
            workflow.logger.warning("Rejecting booking %s: %s", req.booking_ref, exc)
            return self._result(BookingStatus.REJECTED, str(exc))

        retry_policy = RetryPolicy(
            maximum_attempts=5,
            initial_interval=timedelta(seconds=1),
            backoff_coefficient=2.0,
            non_retryable_error_types=NON_RETRYABLE_ERRORS,
        )
        activity_opts = {
            "start_to_close_timeout": timedelta(seconds=10),
            "retry_policy": retry_policy,
        }

        try:
            context = await workflow.execute_activity(
                load_pricing_context,
                PricingContextInput(venue_id=req.venue_id),
                **activity_opts,
            )

            # Evaluate activation at the instant the customer was quoted so
            # both sides agree on weekday and time window.
            now = workflow.now()
            evaluated_at, honoured = evaluation_instant(req.quoted_at, now)
            if req.quoted_at is not None and not honoured:
                workflow.logger.warning(
                    "Booking %s: quoted_at %s is outside the accepted window, pricing at %s",
                    req.booking_ref,
                    req.quoted_at.isoformat(),
                    now.isoformat(),
                )
            self.quote = self.pricing.quote(req.draft, context.venue, context.rules, evaluated_at)
            self.state.priced = True
            workflow.logger.info(
                "Booking %s priced at %.2f (saved %.2f, applied: %s)",
                req.booking_ref,
                self.quote.final_price,
                self.quote.savings,
                ", ".join(self.quote.applied_discounts) or "none",
            )
            if quote_mismatch(req.expected_total, self.quote.final_price):
                workflow.logger.warning(
                    "Booking %s: client quoted %.2f but server priced %.2f; charging server price",
                    req.booking_ref,
                    req.expected_total,
                    self.quote.final_price,
                )

            if self.state.cancelled:
                return self._result(BookingStatus.CANCELLED)
            await workflow.execute_activity(
                charge_customer,
                ChargeInput(
                    booking_ref=req.booking_ref,
                    payment_intent_id=req.payment_intent_id,
                    amount_cents=self.quote.amount_cents,
                ),
                **activity_opts,
            )
            self.state.charged = True

            # Cancellation is not honoured once charged.
            self.booking_id = await workflow.execute_activity(
                create_booking,
                PersistBookingInput(
                    booking_ref=req.booking_ref,
                    user_id=req.user_id,
                    user_email=req.user_email,
                    venue_id=req.venue_id,
                    service_id=req.service_id,
                    booking_date=req.booking_date,
                    booking_time=req.draft.arrival_time,
                    guest_count=req.draft.guests,
                    total_price=self.quote.final_price,
                    special_requests=req.special_requests,
                ),
                **activity_opts,
            )
            self.state.booked = True

        except Exception:
            workflow.logger.exception("Booking %s failed", req.booking_ref)
            return self._result(BookingStatus.FAILED)

        try:
            self.state.notified = await workflow.execute_activity(
                send_booking_notification,
                NotificationInput(
                    user_id=req.user_id,
                    booking_id=self.booking_id,
                    venue_name=context.venue.name or context.venue.id,
                    booking_date=req.booking_date,
                ),
                start_to_close_timeout=timedelta(seconds=10),
                retry_policy=RetryPolicy(maximum_attempts=3),
            )
        except Exception:
            # The booking stands even if the customer is not notified.
            workflow.logger.exception("Notification for booking %s failed", req.booking_ref)

        workflow.logger.info("Booking %s confirmed as %s", req.booking_ref, self.booking_id)
        return self._result(BookingStatus.CONFIRMED, "Payment confirmed and booking created")
