import pytest

from venue_booking.services.factory import ServiceFactory


@pytest.fixture(autouse=True)
def fresh_services():
    ServiceFactory.reset()
    yield
    ServiceFactory.reset()
