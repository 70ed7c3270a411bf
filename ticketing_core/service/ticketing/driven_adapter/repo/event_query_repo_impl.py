"""
Event Query Repository Implementation - CQRS Read Side
"""

from typing import Optional

from sqlalchemy import select

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from ticketing_core.service.ticketing.domain.entity.event_entity import Event, TicketType
from ticketing_core.service.ticketing.driven_adapter.model.event_model import EventModel
from ticketing_core.service.ticketing.driven_adapter.repo.session_mixin import SessionAwareRepo


class EventQueryRepoImpl(SessionAwareRepo, IEventQueryRepo):
    """Event Query Repository Implementation - CQRS Read Side"""

    def _model_to_event(self, event_model: EventModel) -> Event:
        return Event(
            id=event_model.id,
            title=event_model.title,
            description=event_model.description,
            ticket_types=[
                TicketType(
                    name=ticket_type.name,
                    price=ticket_type.price,
                    quantity=ticket_type.quantity,
                    available=ticket_type.available,
                )
                for ticket_type in event_model.ticket_types
            ],
            created_at=event_model.created_at,
        )

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> Optional[Event]:
        async with self._get_session() as session:
            event_model = await session.scalar(
                select(EventModel)
                .where(EventModel.id == event_id)
                .execution_options(populate_existing=True)
            )
            return self._model_to_event(event_model) if event_model else None
