"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from ticketing_core.platform.config.core_setting import Settings, settings
from ticketing_core.platform.database.orm_db_setting import Database
from ticketing_core.platform.database.unit_of_work import (
    AbstractUnitOfWork,
    SqlAlchemyUnitOfWork,
    UnitOfWorkFactory,
)
from ticketing_core.platform.logging.loguru_io import Logger
from ticketing_core.platform.state.keyed_lock import KeyedLock
from ticketing_core.service.ticketing.app.interface.i_booking_query_repo import IBookingQueryRepo
from ticketing_core.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from ticketing_core.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from ticketing_core.service.ticketing.driven_adapter.payment.http_payment_gateway import (
    HttpPaymentGateway,
)
from ticketing_core.service.ticketing.driven_adapter.payment.mock_payment_gateway import (
    MockPaymentGateway,
)
from ticketing_core.service.ticketing.driven_adapter.repo.booking_query_repo_impl import (
    BookingQueryRepoImpl,
)
from ticketing_core.service.ticketing.driven_adapter.repo.event_query_repo_impl import (
    EventQueryRepoImpl,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_booking_repo import (
    InMemoryBookingQueryRepo,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_event_repo import (
    InMemoryEventQueryRepo,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_store import (
    InMemoryTicketingStore,
)
from ticketing_core.service.ticketing.driven_adapter.state.in_memory_unit_of_work import (
    InMemoryUnitOfWork,
)


# =============================================================================
# Backend selection (STORAGE_BACKEND / PAYMENT_GATEWAY)
# =============================================================================


def build_unit_of_work_factory(
    *, config: Settings, database: Database, store: InMemoryTicketingStore
) -> UnitOfWorkFactory:
    if config.STORAGE_BACKEND == 'memory':

        def _memory_uow() -> AbstractUnitOfWork:
            return InMemoryUnitOfWork(store)

        return _memory_uow

    def _sql_uow() -> AbstractUnitOfWork:
        return SqlAlchemyUnitOfWork(database.session)

    return _sql_uow


def build_booking_query_repo(
    *, config: Settings, database: Database, store: InMemoryTicketingStore
) -> IBookingQueryRepo:
    if config.STORAGE_BACKEND == 'memory':
        return InMemoryBookingQueryRepo(store=store)
    return BookingQueryRepoImpl(session_factory=database.session)


def build_event_query_repo(
    *, config: Settings, database: Database, store: InMemoryTicketingStore
) -> IEventQueryRepo:
    if config.STORAGE_BACKEND == 'memory':
        return InMemoryEventQueryRepo(store=store)
    return EventQueryRepoImpl(session_factory=database.session)


def build_payment_gateway(*, config: Settings) -> IPaymentGateway:
    if config.PAYMENT_GATEWAY == 'http':
        return HttpPaymentGateway()
    return MockPaymentGateway()


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Object(settings)

    # Storage
    database = providers.Singleton(Database)
    ticketing_store = providers.Singleton(InMemoryTicketingStore)
    unit_of_work_factory = providers.Singleton(
        build_unit_of_work_factory,
        config=config_service,
        database=database,
        store=ticketing_store,
    )

    # Read side (outside any unit of work)
    booking_query_repo = providers.Singleton(
        build_booking_query_repo, config=config_service, database=database, store=ticketing_store
    )
    event_query_repo = providers.Singleton(
        build_event_query_repo, config=config_service, database=database, store=ticketing_store
    )

    # Serializes payment, callback and cancellation per booking within this process
    booking_lock = providers.Singleton(KeyedLock, name='booking')

    # Payment
    payment_gateway = providers.Singleton(build_payment_gateway, config=config_service)


container = Container()


def setup() -> None:
    config = container.config_service()
    container.unit_of_work_factory()
    container.payment_gateway()
    Logger.base.info(
        f'🔌 [DI] storage={config.STORAGE_BACKEND} payment_gateway={config.PAYMENT_GATEWAY}'
    )


async def cleanup() -> None:
    if container.config_service().STORAGE_BACKEND == 'postgres':
        await container.database().dispose()
    container.reset_singletons()
