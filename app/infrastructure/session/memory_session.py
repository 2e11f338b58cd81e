"""In-process session store for tests and single-worker development."""

from __future__ import annotations

import copy
import json
from typing import Any

from app.shared.utils.datetime import Clock, SystemClock
from app.shared.utils.generators import generate_nonce


class InMemorySession:
    """Session over a dict owned by InMemorySessionStore. Values round-trip through JSON."""

    def __init__(self, store: InMemorySessionStore, session_id: str) -> None:
        self._store = store
        self._session_id = session_id

    @property
    def session_id(self) -> str:
        return self._session_id

    async def get(self, key: str) -> Any | None:
        raw = self._store._data_for(self._session_id).get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._store._touch(self._session_id)[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self._store._data_for(self._session_id).pop(key, None)

    async def destroy(self) -> None:
        self._store._sessions.pop(self._session_id, None)

    def snapshot(self) -> dict[str, Any]:
        """Decoded copy of the session contents."""
        return {
            k: json.loads(v) for k, v in copy.deepcopy(self._store._data_for(self._session_id)).items()
        }


class InMemorySessionStore:
    """Sessions held in process memory with TTL measured on the injected clock."""

    def __init__(self, ttl: int = 3600, clock: Clock | None = None) -> None:
        self.ttl = ttl
        self.clock = clock or SystemClock()
        self._sessions: dict[str, tuple[float, dict[str, str]]] = {}

    def _data_for(self, session_id: str) -> dict[str, str]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return {}
        expires, data = entry
        if self.clock.now().timestamp() >= expires:
            del self._sessions[session_id]
            return {}
        return data

    def _touch(self, session_id: str) -> dict[str, str]:
        data = self._data_for(session_id)
        self._sessions[session_id] = (self.clock.now().timestamp() + self.ttl, data)
        return data

    def is_available(self) -> bool:
        return True

    def open(self, session_id: str | None = None) -> InMemorySession:
        return InMemorySession(self, session_id or generate_nonce())
