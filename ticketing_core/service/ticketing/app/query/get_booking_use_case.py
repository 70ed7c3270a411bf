from typing import Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from ticketing_core.platform.config.di import Container
from ticketing_core.platform.exception.exceptions import ForbiddenError
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.dto.requester import Requester
from ticketing_core.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking
from ticketing_core.service.ticketing.domain.ticketing_errors import BookingNotFoundError


class GetBookingUseCase:
    def __init__(self, *, booking_query_repo: IBookingQueryRepo) -> None:
        self.booking_query_repo = booking_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo)

    @Logger.io
    async def get_booking(self, *, booking_id: uuid.UUID, requester: Requester) -> Booking:
        booking = await self.booking_query_repo.get_by_id(booking_id=booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        if not requester.can_access(booking.user_id):
            raise ForbiddenError('Not allowed to view this booking')
        return booking
