"""Browser session stores (Redis, in-memory)."""

from app.infrastructure.session.memory_session import (
    InMemorySession,
    InMemorySessionStore,
)
from app.infrastructure.session.redis_session import (
    RedisSession,
    RedisSessionStore,
    session_key,
)

__all__ = [
    "InMemorySession",
    "InMemorySessionStore",
    "RedisSession",
    "RedisSessionStore",
    "session_key",
]
