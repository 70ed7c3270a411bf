from typing import List
import uuid

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.command.cancel_booking_use_case import (
    CancelBookingUseCase,
)
from ticketing_core.service.ticketing.app.command.create_booking_use_case import (
    CreateBookingUseCase,
)
from ticketing_core.service.ticketing.app.dto.requester import Requester
from ticketing_core.service.ticketing.app.query.get_booking_use_case import GetBookingUseCase
from ticketing_core.service.ticketing.app.query.list_bookings_use_case import ListBookingsUseCase
from ticketing_core.service.ticketing.domain.value_object.attendee_info import AttendeeInfo
from ticketing_core.service.ticketing.domain.value_object.ticket_line import TicketRequestLine
from ticketing_core.service.ticketing.driving_adapter.http_controller.auth.requester_auth import (
    get_requester,
)
from ticketing_core.service.ticketing.driving_adapter.http_controller.schema.booking_schema import (
    BookingCreateRequest,
    BookingResponse,
    CancelBookingResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_booking(
    request: BookingCreateRequest,
    requester: Requester = Depends(get_requester),
    use_case: CreateBookingUseCase = Depends(CreateBookingUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.create_booking') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('user_id', requester.user_id)

        booking = await use_case.create_booking(
            user_id=requester.user_id,
            event_id=request.event_id,
            lines=[
                TicketRequestLine(ticket_type_name=line.ticket_type, quantity=line.quantity)
                for line in request.tickets
            ],
            payment_method=request.payment_method,
            attendee_info=(
                AttendeeInfo(**request.attendee_info.model_dump())
                if request.attendee_info
                else None
            ),
        )
        return BookingResponse.from_entity(booking)


@router.get('')
@Logger.io
async def list_bookings(
    requester: Requester = Depends(get_requester),
    use_case: ListBookingsUseCase = Depends(ListBookingsUseCase.depends),
) -> List[BookingResponse]:
    bookings = await use_case.list_bookings(requester=requester)
    return [BookingResponse.from_entity(booking) for booking in bookings]


@router.get('/{booking_id}')
@Logger.io
async def get_booking(
    booking_id: uuid.UUID,
    requester: Requester = Depends(get_requester),
    use_case: GetBookingUseCase = Depends(GetBookingUseCase.depends),
) -> BookingResponse:
    booking = await use_case.get_booking(booking_id=booking_id, requester=requester)
    return BookingResponse.from_entity(booking)


@router.patch('/{booking_id}/cancel', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_booking(
    booking_id: uuid.UUID,
    requester: Requester = Depends(get_requester),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> CancelBookingResponse:
    result = await use_case.cancel_booking(
        booking_id=booking_id,
        requester_id=requester.user_id,
        requester_is_admin=requester.is_admin,
    )
    return CancelBookingResponse(
        booking=BookingResponse.from_entity(result.booking),
        already_cancelled=result.already_cancelled,
    )
