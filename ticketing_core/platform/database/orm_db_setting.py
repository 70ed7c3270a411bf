"""
SQLAlchemy async engine and session management

This module provides:
1. AsyncEngineManager: event-loop-aware engine + session maker for one database URL
2. Base: declarative base shared by every model
3. Database: injectable session provider used by repositories and the unit of work

The engine is rebuilt whenever the running event loop changes, which keeps test suites that
spin up a loop per test from hitting "Future attached to a different loop" errors.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from ticketing_core.platform.config.core_setting import settings
from ticketing_core.platform.logging.loguru_io import Logger


class AsyncEngineManager:
    """Owns the engine for one database URL and re-creates it when the event loop changes."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop running, create engine without loop tracking
            if self._engine is None:
                self._engine = self._create_engine()
            return self._engine

        if self._loop is not current_loop:
            if self._engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, disposing old engine...')
                self._engine = None
                self._session_maker = None

            Logger.base.info(f'🔗 [DB] Creating engine for event loop {id(current_loop)}')
            self._engine = self._create_engine()
            self._loop = current_loop

        return self._engine  # type: ignore[return-value]

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        self._loop = None

    def _create_engine(self) -> AsyncEngine:
        # Pool sizing only applies to server databases; SQLite drivers use their own pools
        if self._url.startswith('sqlite'):
            return create_async_engine(self._url, echo=False)
        return create_async_engine(
            self._url,
            echo=False,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


class Base(DeclarativeBase):
    pass


class Database:
    """
    Session provider for dependency injection

    Repositories call `database.session()` for standalone reads; the unit of work opens one
    session per transaction and hands it to every repository it builds.
    """

    def __init__(self, *, url: str | None = None) -> None:
        self._engine_manager = AsyncEngineManager(url or settings.DATABASE_URL_ASYNC)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine_manager.get_engine()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session_maker = self._engine_manager.get_session_maker()
        async with session_maker() as session:
            yield session

    async def create_db_and_tables(self) -> None:
        """Create database tables if they don't exist"""
        # Models register themselves on Base.metadata when imported
        from ticketing_core.service.ticketing.driven_adapter.model import (  # noqa: F401
            booking_model,
            event_model,
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️ [DB] Tables ready')

    async def dispose(self) -> None:
        await self._engine_manager.dispose()
