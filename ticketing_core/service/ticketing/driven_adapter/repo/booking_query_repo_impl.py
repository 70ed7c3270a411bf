from typing import List, Optional
import uuid

from sqlalchemy import select

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.enum.booking_status import (
    BookingStatus,
    PaymentStatus,
)
from ticketing_core.service.ticketing.domain.enum.payment_method import PaymentMethod
from ticketing_core.service.ticketing.domain.value_object.attendee_info import AttendeeInfo
from ticketing_core.service.ticketing.domain.value_object.ticket_line import LineItem
from ticketing_core.service.ticketing.driven_adapter.model.booking_model import BookingModel
from ticketing_core.service.ticketing.driven_adapter.repo.session_mixin import SessionAwareRepo


class BookingQueryRepoImpl(SessionAwareRepo, IBookingQueryRepo):
    @staticmethod
    def _model_to_entity(model: BookingModel) -> Booking:
        return Booking(
            id=model.id,
            booking_reference=model.booking_reference,
            user_id=model.user_id,
            event_id=model.event_id,
            line_items=[
                LineItem(
                    ticket_type_name=item.ticket_type_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in model.line_items
            ],
            total_amount=model.total_amount,
            booking_status=BookingStatus(model.booking_status),
            payment_status=PaymentStatus(model.payment_status),
            payment_method=PaymentMethod(model.payment_method),
            attendee_info=AttendeeInfo.from_dict(model.attendee_info),
            payment_reference=model.payment_reference,
            payment_attempts=model.payment_attempts,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
            paid_at=model.paid_at,
            cancelled_at=model.cancelled_at,
        )

    @Logger.io
    async def get_by_id(self, *, booking_id: uuid.UUID) -> Optional[Booking]:
        async with self._get_session() as session:
            model = await session.scalar(
                select(BookingModel)
                .where(BookingModel.id == booking_id)
                .execution_options(populate_existing=True)
            )
            return self._model_to_entity(model) if model else None

    @Logger.io
    async def list_by_user(self, *, user_id: int) -> List[Booking]:
        async with self._get_session() as session:
            result = await session.scalars(
                select(BookingModel)
                .where(BookingModel.user_id == user_id)
                .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
                .execution_options(populate_existing=True)
            )
            return [self._model_to_entity(model) for model in result.all()]

    @Logger.io
    async def list_all(self) -> List[Booking]:
        async with self._get_session() as session:
            result = await session.scalars(
                select(BookingModel)
                .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
                .execution_options(populate_existing=True)
            )
            return [self._model_to_entity(model) for model in result.all()]
