from ticketing_core.platform.database.unit_of_work import AbstractUnitOfWork
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_booking_repo import (
    InMemoryBookingCommandRepo,
    InMemoryBookingQueryRepo,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_event_repo import (
    InMemoryEventCommandRepo,
    InMemoryEventQueryRepo,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_inventory_ledger import (
    InMemoryInventoryLedger,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_store import (
    InMemoryTicketingStore,
)
from ticketing_core.service.ticketing.driven_adapter.state.undo_journal import UndoJournal


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Unit of work over the in-process store

    Writes land in the store immediately; each adapter journals its inverse. Commit forgets the
    journal, rollback replays it newest first, so a booking write failing after a reservation
    gives the tickets back before the error reaches the caller.
    """

    def __init__(self, store: InMemoryTicketingStore) -> None:
        self.store = store
        self.journal = UndoJournal()

    async def __aenter__(self) -> AbstractUnitOfWork:
        self.journal.clear()
        self.inventory_ledger = InMemoryInventoryLedger(store=self.store, journal=self.journal)
        self.booking_command_repo = InMemoryBookingCommandRepo(
            store=self.store, journal=self.journal
        )
        self.booking_query_repo = InMemoryBookingQueryRepo(store=self.store)
        self.event_command_repo = InMemoryEventCommandRepo(store=self.store, journal=self.journal)
        self.event_query_repo = InMemoryEventQueryRepo(store=self.store)
        return await super().__aenter__()

    async def _commit(self) -> None:
        self.journal.clear()

    async def rollback(self) -> None:
        self.journal.replay()
