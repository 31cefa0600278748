"""FastAPI application factory."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import Engine

from ofertasya.api.routes import SERVICE_NAME, api_router, router
from ofertasya.config import Settings
from ofertasya.config import settings as default_settings
from ofertasya.db import build_engine, build_sessionmaker, init_db
from ofertasya.jobs.poller import Poller
from ofertasya.offers.service import IngestionService
from ofertasya.offers.store import OfferStore, SqlOfferStore
from ofertasya.outbound.broadcast import WebSocketBroadcaster
from ofertasya.sources.base import OfferSource
from ofertasya.sources.registry import build_source

logger = structlog.get_logger()


def create_app(
    settings: Settings | None = None,
    *,
    store: OfferStore | None = None,
    broadcaster: WebSocketBroadcaster | None = None,
    source: OfferSource | None = None,
    start_poller: bool = True,
) -> FastAPI:
    """Wire store, broadcaster, ingestion service and poller into one app."""
    settings = settings or default_settings
    engine: Engine | None = None
    if store is None:
        engine = build_engine(settings.database_url)
        store = SqlOfferStore(build_sessionmaker(engine))
    broadcaster = broadcaster or WebSocketBroadcaster()
    service = IngestionService(store, broadcaster)
    poller = Poller(service, source or build_source(settings), settings.poll_interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if engine is not None:
            init_db(engine)
        if start_poller:
            poller.start()
        logger.info("Application startup complete", demo_mode=settings.demo_mode, port=settings.port)
        try:
            yield
        finally:
            poller.stop()
            if poller.task is not None:
                await asyncio.gather(poller.task, return_exceptions=True)
            if engine is not None:
                engine.dispose()
            logger.info("Application shutdown complete")

    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.broadcaster = broadcaster
    app.state.service = service
    app.state.poller = poller

    app.include_router(router)
    app.include_router(api_router)
    return app
