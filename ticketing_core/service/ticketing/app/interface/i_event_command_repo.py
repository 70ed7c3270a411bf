from abc import ABC, abstractmethod

from ticketing_core.service.ticketing.domain.entity.event_entity import Event


class IEventCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, event: Event) -> Event:
        """Persist a new event with its ticket types; returns it with its id assigned"""
        pass
