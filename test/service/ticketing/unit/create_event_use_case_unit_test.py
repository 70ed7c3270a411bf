from decimal import Decimal

import pytest

from ticketing_core.platform.exception.exceptions import ForbiddenError
from ticketing_core.service.ticketing.app.command.create_event_use_case import (
    CreateEventUseCase,
    TicketTypeDraft,
)
from ticketing_core.service.ticketing.domain.ticketing_errors import InvalidEventRequestError


@pytest.mark.unit
class TestCreateEvent:
    @pytest.mark.asyncio
    async def test_admin_creates_event_with_full_inventory(self, uow_factory, store) -> None:
        # Arrange
        use_case = CreateEventUseCase(uow_factory=uow_factory)

        # Act
        event = await use_case.create_event(
            title='Jazz Night',
            description='Late set',
            ticket_types=[
                TicketTypeDraft(name='General', price=Decimal('30'), quantity=50),
                TicketTypeDraft(name='Table', price=Decimal('120.50'), quantity=4),
            ],
            requester_is_admin=True,
        )

        # Assert
        assert event.id is not None
        assert [(t.name, t.quantity, t.available) for t in event.ticket_types] == [
            ('General', 50, 50),
            ('Table', 4, 4),
        ]
        assert store.events[event.id].title == 'Jazz Night'

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, uow_factory, store) -> None:
        use_case = CreateEventUseCase(uow_factory=uow_factory)

        with pytest.raises(ForbiddenError):
            await use_case.create_event(
                title='Jazz Night',
                description='',
                ticket_types=[TicketTypeDraft(name='General', price=Decimal('30'), quantity=5)],
                requester_is_admin=False,
            )
        assert store.events == {}

    @pytest.mark.asyncio
    async def test_zero_quantity_rejected(self, uow_factory) -> None:
        use_case = CreateEventUseCase(uow_factory=uow_factory)

        with pytest.raises(InvalidEventRequestError):
            await use_case.create_event(
                title='Jazz Night',
                description='',
                ticket_types=[TicketTypeDraft(name='General', price=Decimal('30'), quantity=0)],
                requester_is_admin=True,
            )
