"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic (SRP). Used by main.py;
no business logic here, only wiring of infrastructure (shared HTTP client,
session store, DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from app.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: shared provider HTTP client, session store (Redis when
    enabled and reachable, otherwise in-process). Shutdown order: HTTP client
    close, session store disconnect, SQL engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    # Shared HTTP client for provider calls (connection reuse).
    app.state.provider_http_client = httpx.AsyncClient(
        timeout=settings.provider_timeout_seconds
    )

    from app.infrastructure.session import InMemorySessionStore, RedisSessionStore

    session_store = None
    if settings.redis_enabled:
        redis_store = RedisSessionStore(ttl=settings.session_ttl_seconds)
        await redis_store.connect()
        if redis_store.is_available():
            session_store = redis_store
    if session_store is None:
        logger.warning(
            "Using in-process session store; authorization flows will not survive "
            "restarts or span multiple workers"
        )
        session_store = InMemorySessionStore(ttl=settings.session_ttl_seconds)
    app.state.session_store = session_store

    yield

    # ---- Shutdown ----
    if getattr(app.state, "provider_http_client", None) is not None:
        await app.state.provider_http_client.aclose()
        app.state.provider_http_client = None
        logger.info("Provider HTTP client closed")

    store = getattr(app.state, "session_store", None)
    if isinstance(store, RedisSessionStore):
        await store.disconnect()
    app.state.session_store = None

    from app.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.dispose_engine()
        logger.info("Database engine disposed")
