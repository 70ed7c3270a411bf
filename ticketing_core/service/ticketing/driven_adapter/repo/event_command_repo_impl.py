import attrs

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.interface.i_event_command_repo import IEventCommandRepo
from ticketing_core.service.ticketing.domain.entity.event_entity import Event
from ticketing_core.service.ticketing.driven_adapter.model.event_model import (
    EventModel,
    TicketTypeModel,
)
from ticketing_core.service.ticketing.driven_adapter.repo.session_mixin import SessionAwareRepo


class EventCommandRepoImpl(SessionAwareRepo, IEventCommandRepo):
    @Logger.io
    async def create(self, *, event: Event) -> Event:
        model = EventModel(
            title=event.title,
            description=event.description,
            ticket_types=[
                TicketTypeModel(
                    position=position,
                    name=ticket_type.name,
                    price=ticket_type.price,
                    quantity=ticket_type.quantity,
                    available=ticket_type.available,
                )
                for position, ticket_type in enumerate(event.ticket_types)
            ],
        )
        if event.created_at is not None:
            model.created_at = event.created_at

        async with self._get_session() as session:
            session.add(model)
            await session.flush()

        Logger.base.info(f'🎪 [EVENT] Created event {model.id} "{event.title}"')
        return attrs.evolve(event, id=model.id)
