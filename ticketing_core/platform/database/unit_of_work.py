"""
Unit of Work

Architecture:
- The UoW owns the transaction boundary: everything done through its repositories and its
  inventory ledger commits or rolls back together
- Leaving the `async with` block without `commit()` rolls back
- Use cases receive a factory and open one UoW per attempt
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, AsyncContextManager, Callable

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from ticketing_core.service.ticketing.app.interface.i_booking_command_repo import (
        IBookingCommandRepo,
    )
    from ticketing_core.service.ticketing.app.interface.i_booking_query_repo import (
        IBookingQueryRepo,
    )
    from ticketing_core.service.ticketing.app.interface.i_event_command_repo import (
        IEventCommandRepo,
    )
    from ticketing_core.service.ticketing.app.interface.i_event_query_repo import (
        IEventQueryRepo,
    )
    from ticketing_core.service.ticketing.app.interface.i_inventory_ledger import (
        IInventoryLedger,
    )


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the ticketing core

    Usage:
        async with uow_factory() as uow:
            reserved = await uow.inventory_ledger.try_reserve(event_id=..., lines=...)
            await uow.booking_command_repo.create(booking=...)
            await uow.commit()
    """

    inventory_ledger: IInventoryLedger

    booking_command_repo: IBookingCommandRepo
    booking_query_repo: IBookingQueryRepo

    event_command_repo: IEventCommandRepo
    event_query_repo: IEventQueryRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        """Undo everything not yet committed. A no-op after a successful commit."""
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """One database transaction shared by every repository of the unit."""

    def __init__(self, session_factory: Callable[[], AsyncContextManager[AsyncSession]]) -> None:
        self._session_factory = session_factory
        self._session_cm: AsyncContextManager[AsyncSession] | None = None
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> AbstractUnitOfWork:
        from ticketing_core.service.ticketing.driven_adapter.repo.booking_command_repo_impl import (
            BookingCommandRepoImpl,
        )
        from ticketing_core.service.ticketing.driven_adapter.repo.booking_query_repo_impl import (
            BookingQueryRepoImpl,
        )
        from ticketing_core.service.ticketing.driven_adapter.repo.event_command_repo_impl import (
            EventCommandRepoImpl,
        )
        from ticketing_core.service.ticketing.driven_adapter.repo.event_query_repo_impl import (
            EventQueryRepoImpl,
        )
        from ticketing_core.service.ticketing.driven_adapter.repo.inventory_ledger_impl import (
            InventoryLedgerImpl,
        )

        self._session_cm = self._session_factory()
        self.session = await self._session_cm.__aenter__()

        # Every repository shares the unit's session
        self.inventory_ledger = InventoryLedgerImpl(session=self.session)
        self.booking_command_repo = BookingCommandRepoImpl(session=self.session)
        self.booking_query_repo = BookingQueryRepoImpl(session=self.session)
        self.event_command_repo = EventCommandRepoImpl(session=self.session)
        self.event_query_repo = EventQueryRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self._session_cm is not None:
                await self._session_cm.__aexit__(*args)
            self._session_cm = None
            self.session = None

    async def _commit(self) -> None:
        if self.session is None:
            raise RuntimeError('Unit of work used outside its async with block')
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
