import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from photoshoot.api.routes import captures, collages, photos, websocket
from photoshoot.app_logging import configure_logging
from photoshoot.containers import AppContainer, build_container

logger = logging.getLogger(__name__)


async def delayed_backfill(container: AppContainer, delay: float):
    """Wait for storage and network to settle, then fill in missing collages."""
    await asyncio.sleep(delay)
    logger.info("Checking for missing collages...")
    await run_in_threadpool(container.discovery.run_backfill_sweep)


def create_app(container: Optional[AppContainer] = None) -> FastAPI:
    container = container or build_container()
    settings = container.settings
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.container.image_store.ensure_root()
        backfill = None
        if settings.backfill_on_startup:
            backfill = asyncio.create_task(delayed_backfill(app.state.container, settings.backfill_delay_seconds))
        yield
        if backfill is not None:
            backfill.cancel()
            with suppress(asyncio.CancelledError):
                await backfill

    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(captures.router, prefix="/api")
    app.include_router(collages.router, prefix="/api")
    app.include_router(photos.router, prefix="/api")
    app.include_router(websocket.router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "connected_screens": len(container.screen_manager.connected_screens()),
            "remote_storage": container.remote_store is not None,
        }

    return app
