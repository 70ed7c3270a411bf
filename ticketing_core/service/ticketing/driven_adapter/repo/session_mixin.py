from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable

from sqlalchemy.ext.asyncio import AsyncSession


class SessionAwareRepo:
    """
    Repositories run either inside a unit of work (shared `session`) or standalone
    (`session_factory`, one short session per call).
    """

    def __init__(
        self,
        *,
        session: AsyncSession | None = None,
        session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None,
    ) -> None:
        self.session = session
        self.session_factory = session_factory

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')
