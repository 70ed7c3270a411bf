from decimal import Decimal
from typing import List, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from ticketing_core.platform.config.di import Container
from ticketing_core.platform.database.unit_of_work import UnitOfWorkFactory
from ticketing_core.platform.exception.exceptions import ForbiddenError
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.domain.entity.event_entity import Event, TicketType


@attrs.frozen
class TicketTypeDraft:
    name: str
    price: Decimal
    quantity: int


class CreateEventUseCase:
    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work_factory]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def create_event(
        self,
        *,
        title: str,
        description: str,
        ticket_types: List[TicketTypeDraft],
        requester_is_admin: bool,
    ) -> Event:
        if not requester_is_admin:
            raise ForbiddenError('Only admins can create events')

        event = Event.create(
            title=title,
            description=description,
            ticket_types=[
                TicketType(
                    name=draft.name,
                    price=draft.price,
                    quantity=draft.quantity,
                    available=max(draft.quantity, 0),
                )
                for draft in ticket_types
            ],
        )

        async with self.uow_factory() as uow:
            event = await uow.event_command_repo.create(event=event)
            await uow.commit()
        return event
