"""
Base Aggregator for the dashboard API

Provides the flow every aggregator shares:
    check cache -> on miss, fetch + transform + sort -> store in cache -> respond

Subclasses implement:
- cache_key: Key for this aggregator and its scope parameters
- ttl: Cache lifetime in seconds
- fetch(): Upstream fetch producing the JSON-ready payload
"""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal

import httpx

from workboard.core import get_logger
from workboard.secure_config import HTTPConfig
from workboard.storage.cache import ResponseCache

CACHE_HIT = "HIT"
CACHE_MISS = "MISS"


@dataclass(frozen=True)
class CachedPayload:
    """
    Serialized aggregator output.

    Attributes:
        body: JSON text, byte-for-byte what is cached and served
        cache_status: "HIT" when served from cache, "MISS" when freshly fetched
    """

    body: str
    cache_status: Literal["HIT", "MISS"]


class BaseAggregator(ABC):
    """Base class for aggregators with shared cache-aside handling

    Args:
        name: Aggregator name used for logging
        cache: Response cache (may wrap no store, in which case nothing is cached)
        http_config: Upstream timeout / retry settings
        transport: Optional httpx transport handed to upstream clients
    """

    def __init__(
        self,
        name: str,
        cache: ResponseCache,
        http_config: HTTPConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.name = name
        self.cache = cache
        self.http_config = http_config or HTTPConfig()
        self.transport = transport
        self.logger = get_logger(f"workboard.collectors.{name}")

    @property
    @abstractmethod
    def cache_key(self) -> str:
        """Cache key for this aggregator's current scope."""

    @property
    @abstractmethod
    def ttl(self) -> int:
        """Cache TTL in seconds."""

    @abstractmethod
    async def fetch(self) -> dict[str, Any]:
        """Fetch, transform and order upstream data into the response payload."""

    async def collect(self) -> CachedPayload:
        """
        Serve from cache, or fetch and cache a fresh payload.

        Returns:
            CachedPayload with the JSON body and cache status

        Raises:
            Whatever fetch() raises; nothing is cached on failure
        """
        cached = await self.cache.get(self.cache_key)
        if cached is not None:
            self.logger.info(f"{self.name}: cache hit", extra={"cache_key": self.cache_key})
            return CachedPayload(body=cached, cache_status=CACHE_HIT)

        start_time = time.time()
        payload = await self.fetch()
        duration_ms = (time.time() - start_time) * 1000

        body = json.dumps(payload)
        await self.cache.put(self.cache_key, body, self.ttl)

        self.logger.info(
            f"{self.name}: fetched fresh payload",
            extra={"cache_key": self.cache_key, "duration_ms": round(duration_ms, 2), "cached": self.cache.enabled},
        )
        return CachedPayload(body=body, cache_status=CACHE_MISS)
