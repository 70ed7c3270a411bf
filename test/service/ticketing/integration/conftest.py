"""
Integration fixtures: the SQLAlchemy adapters against a throwaway SQLite database (aiosqlite).

SQLite ignores `FOR UPDATE`, so these tests cover the SQL, the mapping and the transaction
boundaries; lock contention is covered by the unit tests.
"""

from collections.abc import AsyncIterator
from decimal import Decimal
from pathlib import Path

import pytest

from ticketing_core.platform.database.orm_db_setting import Database
from ticketing_core.platform.database.unit_of_work import SqlAlchemyUnitOfWork, UnitOfWorkFactory
from ticketing_core.service.ticketing.domain.entity.event_entity import Event, TicketType


@pytest.fixture
async def database(tmp_path: Path) -> AsyncIterator[Database]:
    database = Database(url=f'sqlite+aiosqlite:///{tmp_path / "ticketing.db"}')
    await database.create_db_and_tables()
    yield database
    await database.dispose()


@pytest.fixture
def uow_factory(database: Database) -> UnitOfWorkFactory:
    return lambda: SqlAlchemyUnitOfWork(database.session)


@pytest.fixture
async def concert(uow_factory: UnitOfWorkFactory) -> Event:
    """General: 100 @ 50.00, VIP: 1 @ 200.00"""
    event = Event.create(
        title='Spring Concert',
        description='Open air',
        ticket_types=[
            TicketType(name='General', price=Decimal('50.00'), quantity=100, available=100),
            TicketType(name='VIP', price=Decimal('200.00'), quantity=1, available=1),
        ],
    )
    async with uow_factory() as uow:
        event = await uow.event_command_repo.create(event=event)
        await uow.commit()
    return event
