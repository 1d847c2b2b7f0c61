"""Shared test fixtures and helpers."""

from typing import Optional

import pytest

from pixelperfect.auth.session import MockAuthProvider, Session
from pixelperfect.booking.flow import BookingFlow
from pixelperfect.booking.state_machine import BookingStateMachine
from pixelperfect.schemas.booking_schema import BookingCreate, PaymentDetails
from pixelperfect.schemas.user_schema import Role, User
from pixelperfect.tools.availability import AvailabilityCalculator
from pixelperfect.tools.booking import BookingStore
from pixelperfect.tools.payment import MockPaymentGateway
from pixelperfect.tools.services import ServiceCatalog
from pixelperfect.tools.session_storage import InMemoryStorage

PORTRAIT_ID = "2"
SESSION_DATE = "2024-02-15"
VALID_CARD = {
    "card_number": "4111111111111111",
    "expiry_date": "12/29",
    "cvv": "123",
    "cardholder_name": "Jane Doe",
}


@pytest.fixture
def catalog():
    return ServiceCatalog()


@pytest.fixture
def gateway():
    return MockPaymentGateway(delay_sec=0.0)


@pytest.fixture
def store(catalog, gateway):
    return BookingStore(catalog, gateway)


@pytest.fixture
def availability(store):
    return AvailabilityCalculator(store, schedule=("09:00", "11:00", "13:00", "15:00", "17:00"))


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def session(storage):
    return Session(storage, MockAuthProvider(admin_email="admin@pixelperfect.com", delay_sec=0.0))


@pytest.fixture
def state_machine():
    return BookingStateMachine()


@pytest.fixture
def client_user():
    return make_user()


@pytest.fixture
def admin_user():
    return make_user(user_id="1", email="admin@pixelperfect.com", name="Admin User", role=Role.ADMIN)


@pytest.fixture
def flow(client_user, catalog, store, availability):
    return BookingFlow(client_user, catalog, store, availability)


@pytest.fixture
def card():
    return PaymentDetails(**VALID_CARD)


def make_user(
    user_id: str = "client-7",
    email: str = "jane@example.com",
    name: str = "Jane Doe",
    role: Role = Role.CLIENT,
    verified: bool = True,
) -> User:
    """Helper to create a User."""
    return User(id=user_id, email=email, name=name, role=role, is_email_verified=verified)


def make_booking_data(
    service_id: str = PORTRAIT_ID,
    date: str = SESSION_DATE,
    time: str = "11:00",
    client_id: str = "client-7",
    total_amount: int = 300,
    notes: Optional[str] = None,
) -> BookingCreate:
    """Helper to create booking input with sensible defaults."""
    return BookingCreate(
        client_id=client_id,
        service_id=service_id,
        date=date,
        time=time,
        total_amount=total_amount,
        notes=notes,
    )
