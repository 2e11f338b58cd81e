"""Session port: opaque per-request key/value session supplied by the HTTP layer."""

from __future__ import annotations

from typing import Any, Protocol


class ISession(Protocol):
    """Per-browser session with get/set/destroy semantics.

    Values are JSON-serializable. Expiry is owned by the backing store.
    """

    @property
    def session_id(self) -> str:
        """Opaque identifier (cookie value)."""

    async def get(self, key: str) -> Any | None:
        """Return the value for key, or None."""

    async def set(self, key: str, value: Any) -> None:
        """Store value under key."""

    async def delete(self, key: str) -> None:
        """Remove key if present."""

    async def destroy(self) -> None:
        """Remove every key in this session."""
