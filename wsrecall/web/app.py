"""FastAPI app factory for the workspace API.

`create_app` builds the app from an explicit configuration; `run_web.py`
serves it with uvicorn. While the app runs, the catalog is re-synced in the
background when ``sync.auto_sync`` is enabled.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from wsrecall.__version__ import __version__
from wsrecall.shared.config.config_loader import Config, load_config
from wsrecall.shared.errors import HistoryReadError
from wsrecall.shared.logging.logger import get_logger
from wsrecall.pipeline.context import AppContext, build_context
from wsrecall.web.routers import system, tags, workspaces

logger = get_logger(__name__)


async def auto_sync_loop(context: AppContext, interval_seconds: float) -> None:
    """Sync once, then again every ``interval_seconds`` until cancelled.

    A failed sync is logged and retried on the next tick.
    """
    while True:
        try:
            catalog = await run_in_threadpool(context.sync_service.sync)
            logger.info(f"[WEB] Auto-sync: {len(catalog)} workspaces")
        except HistoryReadError as e:
            logger.error(f"[WEB] Auto-sync failed: {e}")
        await asyncio.sleep(interval_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    context: AppContext = app.state.context
    sync_config = context.config.sync
    logger.info(f"[WEB] Catalog: {context.store.db_path}")

    task = None
    if sync_config.auto_sync:
        interval_seconds = max(sync_config.interval_minutes, 0) * 60
        logger.info(f"[WEB] Auto-sync every {sync_config.interval_minutes:g} minutes")
        task = asyncio.create_task(auto_sync_loop(context, interval_seconds))

    yield

    if task is not None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("[WEB] Auto-sync stopped")


def create_app(config: Optional[Config] = None, context: Optional[AppContext] = None) -> FastAPI:
    """Create the app for an explicit configuration.

    Without arguments the default configuration file is loaded. A prebuilt
    ``context`` takes precedence (tests inject fake runners this way).
    """
    if context is None:
        context = build_context(config or load_config())

    app = FastAPI(
        title="wsrecall API",
        description="Browse, tag and reopen recently used editor workspaces",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = context.config
    app.state.context = context

    # CORS middleware for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(system.router)
    app.include_router(workspaces.router)
    app.include_router(tags.router)

    return app
