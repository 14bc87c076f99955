# postfast/services/cache.py
"""
Cache layer: a three-method key/value interface with TTL.

The cache is an accelerator only. Implementations may raise on transport
errors; ``CacheSynchronizer`` is responsible for swallowing them.
"""

from abc import ABC, abstractmethod
from typing import Optional

from redis import asyncio as aioredis


class CacheBackend(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes or ``None`` on a miss."""

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store ``value`` for ``ttl`` seconds."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    async def close(self) -> None:
        pass


class NullCache(CacheBackend):
    """Always misses. Used when caching is disabled."""

    async def get(self, key: str) -> Optional[bytes]:
        return None

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None


class RedisCache(CacheBackend):
    def __init__(self, client: aioredis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        # raw bytes in and out; payloads are JSON encoded by the caller
        return cls(aioredis.from_url(url, decode_responses=False))

    async def get(self, key: str) -> Optional[bytes]:
        return await self.client.get(key)

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        await self.client.setex(key, ttl, value)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        await self.client.aclose()
