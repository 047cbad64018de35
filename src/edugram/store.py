"""Key-value persistence over Redis.

Every record in the system is a JSON document stored under a colon-delimited
string key (``user:{id}``, ``post:{id}``, ``comment:{postId}:{id}`` ...).
Lookups are by exact key or by key prefix; nothing else is queryable.
"""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as redis

_pool: redis.Redis | None = None

# Keys fetched per round-trip when materialising a prefix scan
_SCAN_BATCH = 200


async def init_redis(url: str) -> None:
    """Open the shared Redis connection pool."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )


def use_redis(client: redis.Redis) -> None:
    """Install an already-built client as the shared pool."""
    global _pool  # noqa: PLW0603
    _pool = client


async def close_redis() -> None:
    """Close the shared Redis connection pool."""
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Return the shared Redis client."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool


class KeyValueStore:
    """Namespaced JSON document store with get/set/prefix-scan."""

    def __init__(self, client: redis.Redis) -> None:
        self.redis = client

    async def get(self, key: str) -> dict[str, Any] | None:
        raw = await self.redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: dict[str, Any]) -> None:
        await self.redis.set(key, json.dumps(value))

    async def set_if_absent(self, key: str, value: dict[str, Any]) -> bool:
        """Write ``value`` only if ``key`` does not exist. Returns True if written."""
        return bool(await self.redis.set(key, json.dumps(value), nx=True))

    async def delete(self, key: str) -> None:
        await self.redis.delete(key)

    async def get_by_prefix(self, prefix: str) -> list[dict[str, Any]]:
        """Return every value whose key starts with ``prefix``, unordered."""
        keys = [key async for key in self.redis.scan_iter(match=f"{_escape_glob(prefix)}*", count=_SCAN_BATCH)]
        values: list[dict[str, Any]] = []
        for start in range(0, len(keys), _SCAN_BATCH):
            batch = await self.redis.mget(keys[start : start + _SCAN_BATCH])
            # A key may expire or be deleted between SCAN and MGET
            values.extend(json.loads(raw) for raw in batch if raw is not None)
        return values


def _escape_glob(prefix: str) -> str:
    """Escape Redis glob metacharacters so the prefix matches literally."""
    out = []
    for ch in prefix:
        if ch in "*?[]\\":
            out.append("\\")
        out.append(ch)
    return "".join(out)


def get_store() -> KeyValueStore:
    """FastAPI dependency: a store bound to the shared Redis pool."""
    return KeyValueStore(get_redis())
