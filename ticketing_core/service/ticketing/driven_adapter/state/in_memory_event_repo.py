from typing import Optional

import attrs

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.service.ticketing.app.interface.i_event_command_repo import IEventCommandRepo
from ticketing_core.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from ticketing_core.service.ticketing.domain.entity.event_entity import Event
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_store import (
    InMemoryTicketingStore,
)
from ticketing_core.service.ticketing.driven_adapter.state.undo_journal import UndoJournal


class InMemoryEventCommandRepo(IEventCommandRepo):
    def __init__(self, *, store: InMemoryTicketingStore, journal: UndoJournal) -> None:
        self.store = store
        self.journal = journal

    @Logger.io
    async def create(self, *, event: Event) -> Event:
        saved = attrs.evolve(event, id=self.store.next_event_id())
        self.store.events[saved.id] = self.store.snapshot(saved)  # type: ignore[index]
        self.journal.record(
            f'create event {saved.id}', lambda: self.store.events.pop(saved.id, None)  # type: ignore[arg-type]
        )
        return saved


class InMemoryEventQueryRepo(IEventQueryRepo):
    def __init__(self, *, store: InMemoryTicketingStore) -> None:
        self.store = store

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> Optional[Event]:
        event = self.store.events.get(event_id)
        return self.store.snapshot(event) if event is not None else None
