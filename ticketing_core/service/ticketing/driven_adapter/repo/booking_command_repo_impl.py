"""
Booking Command Repository Implementation

Writes are optimistic: `update` only succeeds against the version that was read, and every
successful write bumps the version.
"""

from datetime import datetime, timezone

import attrs
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.interface.i_booking_command_repo import (
    IBookingCommandRepo,
)
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    BookingReferenceConflictError,
    ConcurrentBookingUpdateError,
)
from ticketing_core.service.ticketing.driven_adapter.model.booking_model import (
    BookingLineItemModel,
    BookingModel,
)
from ticketing_core.service.ticketing.driven_adapter.repo.session_mixin import SessionAwareRepo


class BookingCommandRepoImpl(SessionAwareRepo, IBookingCommandRepo):
    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        model = BookingModel(
            id=booking.id,
            booking_reference=booking.booking_reference,
            user_id=booking.user_id,
            event_id=booking.event_id,
            total_amount=booking.total_amount,
            booking_status=booking.booking_status.value,
            payment_status=booking.payment_status.value,
            payment_method=booking.payment_method.value,
            payment_reference=booking.payment_reference,
            payment_attempts=booking.payment_attempts,
            attendee_info=booking.attendee_info.to_dict() if booking.attendee_info else None,
            version=booking.version,
            created_at=booking.created_at or datetime.now(timezone.utc),
            updated_at=booking.updated_at or datetime.now(timezone.utc),
            paid_at=booking.paid_at,
            cancelled_at=booking.cancelled_at,
            line_items=[
                BookingLineItemModel(
                    position=position,
                    ticket_type_name=item.ticket_type_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for position, item in enumerate(booking.line_items)
            ],
        )

        async with self._get_session() as session:
            session.add(model)
            try:
                await session.flush()
            except IntegrityError as e:
                if 'booking_reference' in str(e.orig):
                    raise BookingReferenceConflictError(booking.booking_reference) from e
                raise

        return booking

    @Logger.io
    async def update(self, *, booking: Booking) -> Booking:
        async with self._get_session() as session:
            result = await session.execute(
                update(BookingModel)
                .where(BookingModel.id == booking.id, BookingModel.version == booking.version)
                .values(
                    booking_status=booking.booking_status.value,
                    payment_status=booking.payment_status.value,
                    payment_reference=booking.payment_reference,
                    payment_attempts=booking.payment_attempts,
                    version=booking.version + 1,
                    updated_at=booking.updated_at or datetime.now(timezone.utc),
                    paid_at=booking.paid_at,
                    cancelled_at=booking.cancelled_at,
                )
                .execution_options(synchronize_session=False)
            )

        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise ConcurrentBookingUpdateError(booking.id)

        return attrs.evolve(booking, version=booking.version + 1)
