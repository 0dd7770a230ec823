"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from ..core.listing import AsyncListingService
from ..core.schema import apply_schema
from ..entities import registry
from ..ports.db_api import (
    AsyncDatabase,
    Database,
    PoolConnector,
    connect_pool,
    dialect_for,
)
from ..settings import Settings, get_settings
from .errors import configure_exception_handlers
from .routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None, pool: Optional[PoolConnector] = None
) -> FastAPI:
    """Create the listing service application.

    Page queries run on pooled connections in worker threads, so a slow query
    neither blocks other requests nor outlives `PAGINATION_REQUEST_TIMEOUT`.

    Args:
        settings: Service settings; loaded from the environment when omitted.
        pool: Connection pool for `settings.database.dialect`. When omitted,
            one is built from `settings.database` and closed at shutdown.

    Returns:
        Configured FastAPI application instance.
    """

    settings = settings or get_settings()
    logging.basicConfig(level=settings.logging.level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = pool is None
        store_pool = connect_pool(settings.database) if owned else pool
        dialect = dialect_for(settings.database.dialect)
        if settings.database.auto_schema:
            with Database(store_pool, dialect) as db:
                for descriptor in registry:
                    apply_schema(db, descriptor)
        store = AsyncDatabase(
            store_pool, dialect, acquire_timeout=settings.database.pool_timeout
        )
        pagination = settings.pagination
        app.state.listing_services = {
            descriptor.model: AsyncListingService(
                store,
                descriptor,
                default_limit=pagination.default_limit,
                max_limit=pagination.max_limit,
                timeout=pagination.request_timeout,
            )
            for descriptor in registry
        }
        logger.info(
            "Listing service ready (%s, %d entities, pool of %d)",
            dialect.name,
            len(registry),
            store_pool.max_size,
        )
        try:
            yield
        finally:
            await store.aclose()
            if owned:
                store_pool.close()

    app = FastAPI(title="keyset-pager", lifespan=lifespan)
    configure_exception_handlers(app)
    app.include_router(router)
    return app
