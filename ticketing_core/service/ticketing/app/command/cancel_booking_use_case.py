from typing import Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from ticketing_core.platform.config.di import Container
from ticketing_core.platform.database.unit_of_work import UnitOfWorkFactory
from ticketing_core.platform.exception.exceptions import ForbiddenError
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.metrics.ticketing_metrics import metrics
from ticketing_core.platform.state.keyed_lock import KeyedLock
from ticketing_core.service.ticketing.app.dto.cancellation_dto import CancellationResult
from ticketing_core.service.ticketing.domain.enum.booking_status import PaymentStatus
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    BookingNotFoundError,
    ConcurrentBookingUpdateError,
)


class CancelBookingUseCase:
    """
    Cancel a booking and give its tickets back

    Flow (one unit of work):
    1. Load booking, check owner or admin
    2. Already cancelled -> idempotent success, nothing changes
    3. Transition to cancelled (refunded when it was paid) with a version-checked write
    4. Release the booked line items through the inventory ledger
    5. Commit - a failing release rolls the status write back and vice versa
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, booking_lock: KeyedLock) -> None:
        self.uow_factory = uow_factory
        self.booking_lock = booking_lock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.unit_of_work_factory]),
        booking_lock: KeyedLock = Depends(Provide[Container.booking_lock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, booking_lock=booking_lock)

    @Logger.io
    async def cancel_booking(
        self, *, booking_id: uuid.UUID, requester_id: int, requester_is_admin: bool = False
    ) -> CancellationResult:
        with self.tracer.start_as_current_span(
            'use_case.cancel_booking', attributes={'booking.id': str(booking_id)}
        ):
            async with self.booking_lock.hold(booking_id):
                try:
                    return await self._cancel(
                        booking_id=booking_id,
                        requester_id=requester_id,
                        requester_is_admin=requester_is_admin,
                    )
                except ConcurrentBookingUpdateError:
                    # Another process got there first; fine if it also cancelled
                    async with self.uow_factory() as uow:
                        current = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
                    if current is not None and current.is_cancelled:
                        metrics.record_cancellation(result='already_cancelled')
                        return CancellationResult(booking=current, already_cancelled=True)
                    raise

    async def _cancel(
        self, *, booking_id: uuid.UUID, requester_id: int, requester_is_admin: bool
    ) -> CancellationResult:
        async with self.uow_factory() as uow:
            booking = await uow.booking_query_repo.get_by_id(booking_id=booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_id)

            if not requester_is_admin and not booking.is_owned_by(requester_id):
                raise ForbiddenError('Only the booking owner or an admin can cancel this booking')

            if booking.is_cancelled:
                metrics.record_cancellation(result='already_cancelled')
                return CancellationResult(booking=booking, already_cancelled=True)

            cancelled = await uow.booking_command_repo.update(booking=booking.cancel())
            await uow.inventory_ledger.release(
                event_id=booking.event_id,
                lines=[item.as_request_line() for item in booking.line_items],
            )
            await uow.commit()

        result = 'refunded' if cancelled.payment_status == PaymentStatus.REFUNDED else 'cancelled'
        metrics.record_cancellation(result=result)
        Logger.base.info(
            f'❌ [CANCEL] Booking {cancelled.booking_reference} {result} by user {requester_id}, '
            f'released {[(i.ticket_type_name, i.quantity) for i in booking.line_items]}'
        )
        return CancellationResult(booking=cancelled)
