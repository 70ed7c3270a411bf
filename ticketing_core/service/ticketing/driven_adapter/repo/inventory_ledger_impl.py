"""
Inventory Ledger (SQLAlchemy)

Reservation runs inside the caller's transaction:
1. Lock the requested ticket type rows (`SELECT ... FOR UPDATE`, name order so two bookings
   touching the same types always lock in the same order)
2. Check every line in request order, failing on the first unknown or short line
3. Decrement with `UPDATE ... WHERE available >= :quantity` and verify the row count

A failure after a decrement leaves rollback to the unit of work.
"""

from typing import Dict, List

from sqlalchemy import select, update

from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.metrics.ticketing_metrics import metrics
from ticketing_core.service.ticketing.app.interface.i_inventory_ledger import IInventoryLedger
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
from ticketing_core.service.ticketing.driven_adapter.model.event_model import (
    EventModel,
    TicketTypeModel,
)
from ticketing_core.service.ticketing.driven_adapter.repo.session_mixin import SessionAwareRepo


class InventoryLedgerImpl(SessionAwareRepo, IInventoryLedger):
    async def _lock_ticket_types(
        self, *, event_id: int, lines: List[TicketRequestLine]
    ) -> Dict[str, TicketTypeModel]:
        names = sorted({line.ticket_type_name for line in lines})
        async with self._get_session() as session:
            result = await session.scalars(
                select(TicketTypeModel)
                .where(TicketTypeModel.event_id == event_id, TicketTypeModel.name.in_(names))
                .order_by(TicketTypeModel.name)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            return {row.name: row for row in result.all()}

    async def _event_exists(self, event_id: int) -> bool:
        async with self._get_session() as session:
            found = await session.scalar(select(EventModel.id).where(EventModel.id == event_id))
            return found is not None

    @Logger.io
    async def try_reserve(
        self, *, event_id: int, lines: List[TicketRequestLine]
    ) -> List[LineItem]:
        if not await self._event_exists(event_id):
            raise EventNotFoundError(event_id)

        rows = await self._lock_ticket_types(event_id=event_id, lines=lines)

        for line in lines:
            row = rows.get(line.ticket_type_name)
            if row is None:
                raise UnknownTicketTypeError(line.ticket_type_name)
            if row.available < line.quantity:
                raise InsufficientStockError(line.ticket_type_name, line.quantity, row.available)

        reserved: List[LineItem] = []
        async with self._get_session() as session:
            for line in lines:
                row = rows[line.ticket_type_name]
                result = await session.execute(
                    update(TicketTypeModel)
                    .where(
                        TicketTypeModel.id == row.id,
                        TicketTypeModel.available >= line.quantity,
                    )
                    .values(available=TicketTypeModel.available - line.quantity)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:  # type: ignore[attr-defined]
                    # Unreachable while the row lock is held
                    raise InsufficientStockError(
                        line.ticket_type_name, line.quantity, row.available
                    )
                reserved.append(
                    LineItem(
                        ticket_type_name=row.name,
                        quantity=line.quantity,
                        unit_price=row.price,
                    )
                )

        Logger.base.info(
            f'🎫 [LEDGER] Reserved event={event_id} '
            f'{[(item.ticket_type_name, item.quantity) for item in reserved]}'
        )
        return reserved

    @Logger.io
    async def release(self, *, event_id: int, lines: List[TicketRequestLine]) -> None:
        rows = await self._lock_ticket_types(event_id=event_id, lines=lines)

        async with self._get_session() as session:
            for line in lines:
                row = rows.get(line.ticket_type_name)
                if row is None:
                    raise LedgerInvariantError(
                        f"Cannot release '{line.ticket_type_name}' for event {event_id}: "
                        'ticket type does not exist'
                    )

                restored = row.available + line.quantity
                if restored > row.quantity:
                    metrics.record_ledger_invariant_violation(
                        event_id=event_id, ticket_type=row.name
                    )
                    Logger.base.critical(
                        f"🚨 [LEDGER] Release would push '{row.name}' of event {event_id} to "
                        f'{restored}/{row.quantity}, clamping'
                    )
                    restored = row.quantity

                await session.execute(
                    update(TicketTypeModel)
                    .where(TicketTypeModel.id == row.id)
                    .values(available=restored)
                    .execution_options(synchronize_session=False)
                )

        Logger.base.info(
            f'♻️ [LEDGER] Released event={event_id} '
            f'{[(line.ticket_type_name, line.quantity) for line in lines]}'
        )
