"""
Short-lived key/value cache for aggregated API payloads.

Entries are JSON strings stored with a TTL in seconds and expire passively;
nothing is ever invalidated explicitly. Two backends are provided:

- MemoryCacheStore: per-process dict, the default for local development
- SQLiteCacheStore: a file shared by every worker process on one host

Usage:
    from workboard.storage.cache import ResponseCache, build_cache_store

    cache = ResponseCache(build_cache_store(config.get_cache_config()))
    payload = await cache.get("overview:all")
    if payload is None:
        payload = json.dumps(await fetch())
        await cache.put("overview:all", payload, ttl=90)

Stores offer atomic get/put per key and nothing more: two concurrent misses
for the same key both fetch and both write, last write wins.
"""

import asyncio
import sqlite3
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from workboard.core.logging_config import get_logger
from workboard.secure_config import CacheConfig
from workboard.utils.error_handling import log_and_continue, log_and_return_default

logger = get_logger(__name__)


class CacheStore(ABC):
    """Async key/value store with per-entry TTL."""

    name = "abstract"

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when absent or expired."""

    @abstractmethod
    async def put(self, key: str, value: str, ttl: int) -> None:
        """Store value under key for ttl seconds, replacing any previous entry."""

    def close(self) -> None:
        """Release backend resources."""
        return None


class MemoryCacheStore(CacheStore):
    """
    In-process TTL store.

    Args:
        clock: Monotonic time source in seconds (injectable for tests)
    """

    name = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def put(self, key: str, value: str, ttl: int) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    def __len__(self) -> int:
        return len(self._entries)


# noinspection SqlResolve
SQL_CREATE = """
CREATE TABLE IF NOT EXISTS kv_cache (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    expires_at REAL NOT NULL
);
"""


class SQLiteCacheStore(CacheStore):
    """
    SQLite-backed TTL store.

    Blocking sqlite3 calls run in a worker thread so the event loop stays free.
    Expired rows are pruned on write.

    Args:
        path: Database file path, or ":memory:"
        clock: Wall-clock time source in seconds (shared across processes)
    """

    name = "sqlite"

    def __init__(self, path: str, clock: Callable[[], float] = time.time):
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._clock = clock
        self._lock = threading.RLock()
        self.conn: sqlite3.Connection | None = sqlite3.connect(path, check_same_thread=False)
        with self._lock:
            self.conn.executescript(SQL_CREATE)
            self.conn.commit()

    def _get_sync(self, key: str) -> str | None:
        with self._lock:
            cur = self._connection().execute("SELECT value, expires_at FROM kv_cache WHERE key = ?", (key,))
            row = cur.fetchone()
        if row is None:
            return None
        value, expires_at = row
        if self._clock() >= float(expires_at):
            return None
        return str(value)

    def _put_sync(self, key: str, value: str, ttl: int) -> None:
        now = self._clock()
        with self._lock:
            conn = self._connection()
            conn.execute(
                "REPLACE INTO kv_cache(key, value, expires_at) VALUES (?, ?, ?)",
                (key, value, now + ttl),
            )
            conn.execute("DELETE FROM kv_cache WHERE expires_at <= ?", (now,))
            conn.commit()

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise RuntimeError("SQLiteCacheStore is closed")
        return self.conn

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def put(self, key: str, value: str, ttl: int) -> None:
        await asyncio.to_thread(self._put_sync, key, value, ttl)

    def close(self) -> None:
        with self._lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None


def build_cache_store(config: CacheConfig) -> CacheStore | None:
    """
    Create the configured cache backend.

    Returns:
        A CacheStore, or None when caching is disabled
    """
    if config.backend is None:
        logger.info("No cache backend configured; every request fetches upstream")
        return None
    if config.backend == "memory":
        return MemoryCacheStore()
    if config.backend == "sqlite":
        logger.info(f"Using SQLite cache at {config.sqlite_path}")
        return SQLiteCacheStore(config.sqlite_path)
    raise ValueError(f"Unknown cache backend: {config.backend}")


class ResponseCache:
    """
    Request-facing cache facade.

    Wraps an optional store: with no store every lookup misses and writes are
    dropped. Backend failures are logged and degrade to a miss or a skipped
    write; they never fail the request.
    """

    def __init__(self, store: CacheStore | None):
        self.store = store

    @property
    def enabled(self) -> bool:
        return self.store is not None

    @property
    def backend_name(self) -> str:
        return self.store.name if self.store is not None else "none"

    async def get(self, key: str) -> str | None:
        if self.store is None:
            return None
        try:
            return await self.store.get(key)
        except Exception as e:
            return log_and_return_default(logger, e, {"key": key}, default_value=None, error_type="Cache read")

    async def put(self, key: str, value: str, ttl: int) -> None:
        if self.store is None:
            return
        try:
            await self.store.put(key, value, ttl)
        except Exception as e:
            log_and_continue(logger, e, {"key": key, "ttl": ttl}, "Cache write")
