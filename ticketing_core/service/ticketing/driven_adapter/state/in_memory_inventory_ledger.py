from typing import List

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.metrics.ticketing_metrics import metrics
from ticketing_core.service.ticketing.app.interface.i_inventory_ledger import IInventoryLedger
from ticketing_core.service.ticketing.domain.entity.event_entity import Event, TicketType
from ticketing_core.service.ticketing.domain.ticketing_errors import (
    EventNotFoundError,
    InsufficientStockError,
    LedgerInvariantError,
    UnknownTicketTypeError,
)
from ticketing_core.service.ticketing.domain.value_object.ticket_line import (
    LineItem,
    TicketRequestLine,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_store import (
    InMemoryTicketingStore,
)
from ticketing_core.service.ticketing.driven_adapter.state.undo_journal import UndoJournal


class InMemoryInventoryLedger(IInventoryLedger):
    """
    Inventory ledger over the in-process store

    Check-and-apply for one event runs under that event's lock, so two reservations for the same
    event never interleave. Reservations journal a compensating release for rollback.
    """

    def __init__(self, *, store: InMemoryTicketingStore, journal: UndoJournal) -> None:
        self.store = store
        self.journal = journal

    def _get_event(self, event_id: int) -> Event:
        event = self.store.events.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    @Logger.io
    async def try_reserve(
        self, *, event_id: int, lines: List[TicketRequestLine]
    ) -> List[LineItem]:
        async with self.store.event_locks.hold(event_id):
            event = self._get_event(event_id)

            # Check every line before touching any counter
            resolved: list[tuple[TicketRequestLine, TicketType]] = []
            for line in lines:
                ticket_type = event.find_ticket_type(line.ticket_type_name)
                if ticket_type is None:
                    raise UnknownTicketTypeError(line.ticket_type_name)
                if ticket_type.available < line.quantity:
                    raise InsufficientStockError(
                        line.ticket_type_name, line.quantity, ticket_type.available
                    )
                resolved.append((line, ticket_type))

            reserved = []
            for line, ticket_type in resolved:
                ticket_type.available -= line.quantity
                reserved.append(
                    LineItem(
                        ticket_type_name=ticket_type.name,
                        quantity=line.quantity,
                        unit_price=ticket_type.price,
                    )
                )

        self.journal.record(
            f'reserve event={event_id} lines={[(li.ticket_type_name, li.quantity) for li in reserved]}',
            lambda: self._give_back(event_id, [li.as_request_line() for li in reserved]),
        )
        return reserved

    def _give_back(
        self, event_id: int, lines: List[TicketRequestLine]
    ) -> List[TicketRequestLine]:
        """Returns what was actually added back per ticket type after clamping."""
        event = self._get_event(event_id)
        applied = []
        for line in lines:
            ticket_type = event.find_ticket_type(line.ticket_type_name)
            if ticket_type is None:
                raise LedgerInvariantError(
                    f"Cannot return '{line.ticket_type_name}' to event {event_id}: ticket type is gone"
                )
            before = ticket_type.available
            ticket_type.available = self._clamped(event_id, ticket_type, line.quantity)
            applied.append(
                TicketRequestLine(
                    ticket_type_name=ticket_type.name, quantity=ticket_type.available - before
                )
            )
        return applied

    def _take_back(self, event_id: int, lines: List[TicketRequestLine]) -> None:
        event = self._get_event(event_id)
        for line in lines:
            ticket_type = event.find_ticket_type(line.ticket_type_name)
            if ticket_type is not None:
                ticket_type.available = max(0, ticket_type.available - line.quantity)

    @staticmethod
    def _clamped(event_id: int, ticket_type: TicketType, quantity: int) -> int:
        restored = ticket_type.available + quantity
        if restored > ticket_type.quantity:
            metrics.record_ledger_invariant_violation(
                event_id=event_id, ticket_type=ticket_type.name
            )
            Logger.base.critical(
                f"🚨 [LEDGER] Release would push '{ticket_type.name}' of event {event_id} to "
                f'{restored}/{ticket_type.quantity}, clamping'
            )
            return ticket_type.quantity
        return restored

    @Logger.io
    async def release(self, *, event_id: int, lines: List[TicketRequestLine]) -> None:
        async with self.store.event_locks.hold(event_id):
            event = self.store.events.get(event_id)
            if event is None:
                raise LedgerInvariantError(f'Cannot release tickets of missing event {event_id}')
            for line in lines:
                if event.find_ticket_type(line.ticket_type_name) is None:
                    raise LedgerInvariantError(
                        f"Cannot release '{line.ticket_type_name}' for event {event_id}: "
                        'ticket type does not exist'
                    )
            applied = self._give_back(event_id, lines)

        self.journal.record(
            f'release event={event_id} lines={[(li.ticket_type_name, li.quantity) for li in applied]}',
            lambda: self._take_back(event_id, applied),
        )
