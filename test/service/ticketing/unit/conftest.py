"""
Unit test fixtures for the ticketing core.

Everything runs against a fresh in-memory store per test, so the real ledger and repositories
are exercised without any infrastructure.
"""

from decimal import Decimal
from typing import Callable

import pytest

from ticketing_core.platform.database.unit_of_work import UnitOfWorkFactory
from ticketing_core.platform.state.keyed_lock import KeyedLock
from ticketing_core.service.ticketing.app.command.create_booking_use_case import (
    CreateBookingUseCase,
)
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.entity.event_entity import Event, TicketType
from ticketing_core.service.ticketing.domain.value_object.ticket_line import TicketRequestLine
from ticketing_core.service.ticketing.driven_adapter.payment.mock_payment_gateway import (
    MockPaymentGateway,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_store import (
    InMemoryTicketingStore,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_unit_of_work import (
    InMemoryUnitOfWork,
)


WEBHOOK_SECRET = 'whsec_test'
DECLINE_TOKEN = 'tok_chargeDeclinedInsufficientFunds'


@pytest.fixture
def store() -> InMemoryTicketingStore:
    return InMemoryTicketingStore()


@pytest.fixture
def uow_factory(store: InMemoryTicketingStore) -> UnitOfWorkFactory:
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def booking_lock() -> KeyedLock:
    return KeyedLock('booking')


@pytest.fixture
def gateway() -> MockPaymentGateway:
    return MockPaymentGateway(
        decline_tokens=['tok_chargeDeclined', DECLINE_TOKEN],
        latency_seconds=0,
        webhook_secret=WEBHOOK_SECRET,
    )


@pytest.fixture
async def concert(uow_factory: UnitOfWorkFactory) -> Event:
    """General: 100 @ 50.00, VIP: 1 @ 200.00"""
    event = Event.create(
        title='Spring Concert',
        description='Open air',
        ticket_types=[
            TicketType(name='General', price=Decimal('50.00'), quantity=100, available=100),
            TicketType(name='VIP', price=Decimal('200.00'), quantity=1, available=1),
        ],
    )
    async with uow_factory() as uow:
        event = await uow.event_command_repo.create(event=event)
        await uow.commit()
    return event


@pytest.fixture
def available(store: InMemoryTicketingStore) -> Callable[[int, str], int]:
    """Current available count of a ticket type, read straight from the store."""

    def _available(event_id: int, name: str) -> int:
        ticket_type = store.events[event_id].find_ticket_type(name)
        assert ticket_type is not None
        return ticket_type.available

    return _available


BUYER_ID = 7


@pytest.fixture
def create_booking_use_case(uow_factory: UnitOfWorkFactory) -> CreateBookingUseCase:
    return CreateBookingUseCase(uow_factory=uow_factory)


@pytest.fixture
async def pending_booking(
    create_booking_use_case: CreateBookingUseCase, concert: Event
) -> Booking:
    """Two General tickets (100.00) for user 7, pending/pending."""
    assert concert.id is not None
    return await create_booking_use_case.create_booking(
        user_id=BUYER_ID,
        event_id=concert.id,
        lines=[TicketRequestLine(ticket_type_name='General', quantity=2)],
    )
