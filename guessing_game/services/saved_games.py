from __future__ import annotations

import asyncio
import json
import secrets
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from time import monotonic
from typing import Any, AsyncIterator, Callable, Protocol

import structlog
from redis.asyncio import Redis

from guessing_game.core.config import get_settings
from guessing_game.game.sessions.errors import SavedGameBusyError

logger = structlog.get_logger(__name__)

SAVED_GAME_KEY_PREFIX = "guessing_game:saved:"
GAME_LOCK_TTL_SECONDS = 10
GAME_LOCK_WAIT_SECONDS = 5.0
GAME_LOCK_POLL_SECONDS = 0.05


class SavedGameStore(Protocol):
    """Persistence port for plain session state produced by ``GuessingGameSession.to_state``.

    Callers that read, change and write back one game hold ``lock(game_id)``
    for the whole sequence.
    """

    def lock(self, game_id: str) -> AbstractAsyncContextManager[None]: ...

    async def save(self, game_id: str, state: dict[str, Any]) -> None: ...

    async def load(self, game_id: str) -> dict[str, Any] | None: ...

    async def clear(self, game_id: str) -> None: ...


@dataclass(slots=True)
class _SavedEntry:
    saved_at_mono: float
    payload: str


@dataclass(slots=True)
class _GameLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class InMemorySavedGameStore:
    def __init__(
        self,
        *,
        ttl_seconds: int,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self._ttl_seconds = max(1, int(ttl_seconds))
        self._clock = clock
        self._entries: dict[str, _SavedEntry] = {}
        self._lock = asyncio.Lock()
        self._game_locks: dict[str, _GameLock] = {}

    @asynccontextmanager
    async def lock(self, game_id: str) -> AsyncIterator[None]:
        # Holders include waiters, so the entry is dropped only once nobody needs it.
        game_lock = self._game_locks.setdefault(game_id, _GameLock())
        game_lock.holders += 1
        try:
            async with game_lock.lock:
                yield
        finally:
            game_lock.holders -= 1
            if game_lock.holders == 0:
                self._game_locks.pop(game_id, None)

    def _is_expired(self, entry: _SavedEntry, now: float) -> bool:
        return now - entry.saved_at_mono > self._ttl_seconds

    async def save(self, game_id: str, state: dict[str, Any]) -> None:
        async with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
            for key in expired:
                del self._entries[key]
            self._entries[game_id] = _SavedEntry(saved_at_mono=now, payload=json.dumps(state))

    async def load(self, game_id: str) -> dict[str, Any] | None:
        async with self._lock:
            entry = self._entries.get(game_id)
            if entry is None:
                return None
            if self._is_expired(entry, self._clock()):
                del self._entries[game_id]
                return None
            return json.loads(entry.payload)

    async def clear(self, game_id: str) -> None:
        async with self._lock:
            self._entries.pop(game_id, None)


class RedisSavedGameStore:
    def __init__(
        self,
        redis_client: Redis,
        *,
        ttl_seconds: int,
        key_prefix: str = SAVED_GAME_KEY_PREFIX,
        lock_wait_seconds: float = GAME_LOCK_WAIT_SECONDS,
    ) -> None:
        self._redis = redis_client
        self._ttl_seconds = max(1, int(ttl_seconds))
        self._key_prefix = key_prefix
        self._lock_wait_seconds = lock_wait_seconds

    @classmethod
    def from_settings(cls) -> RedisSavedGameStore:
        settings = get_settings()
        return cls(
            Redis.from_url(settings.redis_url),
            ttl_seconds=settings.saved_game_ttl_seconds,
        )

    def _key(self, game_id: str) -> str:
        return f"{self._key_prefix}{game_id}"

    def _lock_key(self, game_id: str) -> str:
        return f"{self._key_prefix}lock:{game_id}"

    @asynccontextmanager
    async def lock(self, game_id: str) -> AsyncIterator[None]:
        lock_key = self._lock_key(game_id)
        token = secrets.token_hex(8)
        deadline = monotonic() + self._lock_wait_seconds
        while not await self._redis.set(lock_key, token, nx=True, ex=GAME_LOCK_TTL_SECONDS):
            if monotonic() >= deadline:
                logger.warning("saved_game_lock_timeout", game_id=game_id)
                raise SavedGameBusyError(game_id)
            await asyncio.sleep(GAME_LOCK_POLL_SECONDS)
        try:
            yield
        finally:
            current = await self._redis.get(lock_key)
            if isinstance(current, bytes):
                current = current.decode()
            if current == token:
                await self._redis.delete(lock_key)
            else:
                logger.warning("saved_game_lock_expired", game_id=game_id)

    async def save(self, game_id: str, state: dict[str, Any]) -> None:
        await self._redis.set(self._key(game_id), json.dumps(state), ex=self._ttl_seconds)

    async def load(self, game_id: str) -> dict[str, Any] | None:
        raw = await self._redis.get(self._key(game_id))
        if raw is None:
            return None
        try:
            state = json.loads(raw)
        except ValueError:
            logger.warning("saved_game_load_failed", game_id=game_id, reason="invalid_json")
            return None
        if not isinstance(state, dict):
            logger.warning("saved_game_load_failed", game_id=game_id, reason="not_an_object")
            return None
        return state

    async def clear(self, game_id: str) -> None:
        await self._redis.delete(self._key(game_id))

    async def aclose(self) -> None:
        await self._redis.aclose()
