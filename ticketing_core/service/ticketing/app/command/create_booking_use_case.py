import time
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from ticketing_core.platform.config.core_setting import settings
from ticketing_core.platform.config.di import Container
from ticketing_core.platform.database.unit_of_work import UnitOfWorkFactory
from ticketing_core.platform.exception.exceptions import CustomBaseError
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.metrics.ticketing_metrics import metrics
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.enum.payment_method import PaymentMethod
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    BookingReferenceConflictError,
    BookingReferenceExhaustedError,
    InvalidBookingRequestError,
)
from ticketing_core.service.ticketing.domain.value_object.attendee_info import AttendeeInfo
from ticketing_core.service.ticketing.domain.value_object.booking_reference import (
    generate_booking_reference,
)
from ticketing_core.service.ticketing.domain.value_object.ticket_line import TicketRequestLine


class CreateBookingUseCase:
    """
    Create booking use case - reservation protocol

    Flow (one unit of work per attempt):
    1. Validate the requested lines (non-empty, quantity >= 1, no repeated ticket type)
    2. Reserve every line through the inventory ledger, all or nothing
    3. Price the booking from the unit prices the ledger captured
    4. Persist it as pending/pending with a fresh booking reference
    5. Commit

    A failed booking write rolls the unit back, which gives the reserved tickets back before
    the error surfaces. A booking reference collision retries the whole unit with a new
    reference, up to BOOKING_REFERENCE_MAX_ATTEMPTS times.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work_factory]),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @staticmethod
    def _validate_lines(lines: List[TicketRequestLine]) -> None:
        if not lines:
            raise InvalidBookingRequestError('At least one ticket line is required')

        seen: set[str] = set()
        for line in lines:
            if line.quantity < 1:
                raise InvalidBookingRequestError(
                    f"Quantity for '{line.ticket_type_name}' must be at least 1"
                )
            if line.ticket_type_name in seen:
                raise InvalidBookingRequestError(
                    f"Ticket type '{line.ticket_type_name}' appears more than once"
                )
            seen.add(line.ticket_type_name)

    @Logger.io
    async def create_booking(
        self,
        *,
        user_id: int,
        event_id: int,
        lines: List[TicketRequestLine],
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
        attendee_info: Optional[AttendeeInfo] = None,
    ) -> Booking:
        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={'event.id': event_id, 'user.id': user_id},
        ) as span:
            started = time.perf_counter()
            try:
                self._validate_lines(lines)
                booking = await self._reserve_and_persist(
                    user_id=user_id,
                    event_id=event_id,
                    lines=lines,
                    payment_method=payment_method,
                    attendee_info=attendee_info,
                )
            except CustomBaseError as e:
                metrics.record_reservation(
                    event_id=event_id,
                    result=type(e).__name__,
                    duration=time.perf_counter() - started,
                )
                raise

            metrics.record_reservation(
                event_id=event_id, result='reserved', duration=time.perf_counter() - started
            )
            span.set_attribute('booking.id', str(booking.id))
            Logger.base.info(
                f'📝 [CREATE-BOOKING] {booking.booking_reference} ({booking.id}) for user {user_id}, '
                f'event {event_id}, total {booking.total_amount}'
            )
            return booking

    async def _reserve_and_persist(
        self,
        *,
        user_id: int,
        event_id: int,
        lines: List[TicketRequestLine],
        payment_method: PaymentMethod,
        attendee_info: Optional[AttendeeInfo],
    ) -> Booking:
        max_attempts = settings.BOOKING_REFERENCE_MAX_ATTEMPTS
        for attempt in range(1, max_attempts + 1):
            try:
                async with self.uow_factory() as uow:
                    line_items = await uow.inventory_ledger.try_reserve(
                        event_id=event_id, lines=lines
                    )
                    booking = Booking.create(
                        user_id=user_id,
                        event_id=event_id,
                        booking_reference=generate_booking_reference(),
                        line_items=line_items,
                        payment_method=payment_method,
                        attendee_info=attendee_info,
                    )
                    booking = await uow.booking_command_repo.create(booking=booking)
                    await uow.commit()
                    return booking
            except BookingReferenceConflictError as e:
                metrics.record_booking_reference_collision()
                Logger.base.warning(
                    f'🔁 [CREATE-BOOKING] Reference {e.booking_reference} taken '
                    f'(attempt {attempt}/{max_attempts}), retrying'
                )

        raise BookingReferenceExhaustedError(max_attempts)
