"""
Simple factory for service singletons.

The **Factory pattern** centralises service construction. Activities call
`ServiceFactory.get_*()` instead of instantiating services themselves.

Benefits:
  - Single point of change if services need constructor args (e.g. the
    venue data file).
  - Cached instances avoid repeated object creation.
  - Easy to swap implementations for testing (`ServiceFactory.reset()` or
    assign the class-level cache directly).
"""

from venue_booking import config
from venue_booking.services.bookings import BookingService
from venue_booking.services.discounts import DiscountRepository
from venue_booking.services.notify import NotificationService
from venue_booking.services.payment import PaymentService


class ServiceFactory:
    """Lazily creates and caches service instances (class-level singletons)."""

    _discounts: DiscountRepository | None = None
    _payment: PaymentService | None = None
    _bookings: BookingService | None = None
    _notification: NotificationService | None = None

    @classmethod
    def get_discount_repository(cls) -> DiscountRepository:
        if cls._discounts is None:
            if config.VENUE_DATA_FILE:
                cls._discounts = DiscountRepository.from_file(config.VENUE_DATA_FILE)
            else:
                cls._discounts = DiscountRepository()
        return cls._discounts

    @classmethod
    def get_payment_service(cls) -> PaymentService:
        if cls._payment is None:
            cls._payment = PaymentService()
        return cls._payment

    @classmethod
    def get_booking_service(cls) -> BookingService:
        if cls._bookings is None:
            cls._bookings = BookingService()
        return cls._bookings

    @classmethod
    def get_notification_service(cls) -> NotificationService:
        if cls._notification is None:
            cls._notification = NotificationService()
        return cls._notification

    @classmethod
    def reset(cls) -> None:
        cls._discounts = None
        cls._payment = None
        cls._bookings = None
        cls._notification = None
