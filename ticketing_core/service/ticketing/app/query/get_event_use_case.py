from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from ticketing_core.platform.config.di import Container
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from ticketing_core.service.ticketing.domain.entity.event_entity import Event
from ticketing_core.service.ticketing.domain.ticketing_errors import EventNotFoundError


class GetEventUseCase:
    def __init__(self, *, event_query_repo: IEventQueryRepo) -> None:
        self.event_query_repo = event_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
    ) -> Self:
        return cls(event_query_repo=event_query_repo)

    @Logger.io
    async def get_event(self, *, event_id: int) -> Event:
        event = await self.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event
