from fastapi import APIRouter, Depends, status

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.command.create_event_use_case import (
    CreateEventUseCase,
    TicketTypeDraft,
)
from ticketing_core.service.ticketing.app.dto.requester import Requester
from ticketing_core.service.ticketing.app.query.get_event_use_case import GetEventUseCase
from ticketing_core.service.ticketing.driving_adapter.http_controller.auth.requester_auth import (
    require_admin,
)
from ticketing_core.service.ticketing.driving_adapter.http_controller.schema.event_schema import (
    EventCreateRequest,
    EventResponse,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    requester: Requester = Depends(require_admin),
    use_case: CreateEventUseCase = Depends(CreateEventUseCase.depends),
) -> EventResponse:
    event = await use_case.create_event(
        title=request.title,
        description=request.description,
        ticket_types=[
            TicketTypeDraft(name=t.name, price=t.price, quantity=t.quantity)
            for t in request.ticket_types
        ],
        requester_is_admin=requester.is_admin,
    )
    return EventResponse.from_entity(event)


@router.get('/{event_id}')
@Logger.io
async def get_event(
    event_id: int,
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> EventResponse:
    event = await use_case.get_event(event_id=event_id)
    return EventResponse.from_entity(event)
