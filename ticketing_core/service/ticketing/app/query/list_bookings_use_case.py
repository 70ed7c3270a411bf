from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from ticketing_core.platform.config.di import Container
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.dto.requester import Requester
from ticketing_core.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from ticketing_core.service.ticketing.domain.entity.booking_entity import Booking


class ListBookingsUseCase:
    """Admins see every booking, everyone else their own; newest first."""

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
    async def list_bookings(self, *, requester: Requester) -> List[Booking]:
        if requester.is_admin:
            return await self.booking_query_repo.list_all()
        return await self.booking_query_repo.list_by_user(user_id=requester.user_id)
