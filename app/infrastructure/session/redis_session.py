"""Redis-backed browser sessions for authorization state and staged selections.

Each session is one Redis hash (session:{id}) holding JSON values; the TTL is
renewed on every write. Call connect() at startup and disconnect() at shutdown.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis

from app.core.config import get_settings
from app.shared.utils.generators import generate_nonce

logger = logging.getLogger(__name__)


def session_key(session_id: str) -> str:
    """Redis key for a session hash."""
    return f"session:{session_id}"


class RedisSession:
    """One browser session backed by a Redis hash."""

    def __init__(self, client: redis.Redis, session_id: str, ttl: int) -> None:
        self._client = client
        self._session_id = session_id
        self._ttl = ttl

    @property
    def session_id(self) -> str:
        return self._session_id

    async def get(self, key: str) -> Any | None:
        value = await self._client.hget(session_key(self._session_id), key)
        return json.loads(value) if value is not None else None

    async def set(self, key: str, value: Any) -> None:
        name = session_key(self._session_id)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(name, key, json.dumps(value))
            pipe.expire(name, self._ttl)
            await pipe.execute()

    async def delete(self, key: str) -> None:
        await self._client.hdel(session_key(self._session_id), key)

    async def destroy(self) -> None:
        await self._client.delete(session_key(self._session_id))


class RedisSessionStore:
    """Opens RedisSession handles over one shared connection pool."""

    def __init__(self, redis_client: redis.Redis | None = None, ttl: int | None = None) -> None:
        """Initialize the store.

        Args:
            redis_client: Optional Redis client for testing or DI.
            ttl: Session lifetime in seconds (defaults to SESSION_TTL_SECONDS).
        """
        self.redis = redis_client
        self.settings = get_settings()
        self.ttl = ttl or self.settings.session_ttl_seconds
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self.redis is not None:
            return
        try:
            self.redis = redis.Redis(
                host=self.settings.redis_host,
                port=self.settings.redis_port,
                db=self.settings.redis_db,
                password=self.settings.redis_password.get_secret_value()
                if self.settings.redis_password
                else None,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )
            await self.redis.ping()
            self._connected = True
            logger.info(
                "Redis sessions connected: %s:%s",
                self.settings.redis_host,
                self.settings.redis_port,
            )
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s. Sessions unavailable.", e)
            self._connected = False
            self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self._connected = False
            logger.info("Redis sessions disconnected")

    def is_available(self) -> bool:
        """Return True if Redis is connected and usable."""
        return self._connected and self.redis is not None

    def open(self, session_id: str | None = None) -> RedisSession:
        """Return the session for session_id, or a new one when None."""
        if self.redis is None:
            raise RuntimeError("RedisSessionStore is not connected")
        return RedisSession(self.redis, session_id or generate_nonce(), self.ttl)
