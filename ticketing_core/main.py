"""
Production FastAPI Application

Run with: uvicorn ticketing_core.main:app
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from ticketing_core.platform.app_factory import create_app
from ticketing_core.platform.config.di import cleanup, container, setup
from ticketing_core.platform.config.wire_modules import WIRE_MODULES
from ticketing_core.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Ticketing Core] Starting up...')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Ticketing Core] Dependency injection wired')

    setup()

    if container.config_service().STORAGE_BACKEND == 'postgres':
        await container.database().create_db_and_tables()
        Logger.base.info('🗄️  [Ticketing Core] Database tables ensured')

    Logger.base.info('✅ [Ticketing Core] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Ticketing Core] Shutting down...')
    await cleanup()
    container.unwire()
    Logger.base.info('👋 [Ticketing Core] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
