"""
Storage - short-lived response cache

    - cache: CacheStore backends (memory, SQLite) and the ResponseCache facade
"""

from .cache import CacheStore, MemoryCacheStore, ResponseCache, SQLiteCacheStore, build_cache_store

__all__ = ["CacheStore", "MemoryCacheStore", "SQLiteCacheStore", "ResponseCache", "build_cache_store"]
