"""
Redis caching for generated booking summaries.

CACHING STRATEGY
================

What we cache:
  - Text-generation summaries only (never the fallback sentence)
  - Key pattern: "summary:{booking_id}:v{version}"

Why:
  - The text-generation call is the slowest and only billable step of a
    summary request (~1-5s vs ~1ms from Redis)
  - A booking's summary only depends on fields that change with its version

Invalidation strategy:
  - The booking version is part of the key, so a traveller mutation makes
    the old entry unreachable immediately
  - After each mutation the route also deletes "summary:{booking_id}:*"
    so stale versions do not sit around until TTL
  - TTL-based expiry as safety net

Redis is optional: when disabled or unreachable every call here is a no-op
and summaries are simply generated each time.
"""

import json
from typing import Optional

import redis.asyncio as redis
from app.core.config import get_settings
from app.core.metrics import record_cache_operation
from app.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except redis.RedisError as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_summary_key(booking_id: int, version: int) -> str:
    return f"summary:{booking_id}:v{version}"


async def get_cached_summary(booking_id: int, version: int) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_summary_key(booking_id, version)
    try:
        data = await client.get(key)
        if data:
            record_cache_operation("get", "hit")
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        record_cache_operation("get", "miss")
        logger.debug("cache_miss", key=key)
    except redis.RedisError as e:
        record_cache_operation("get", "error")
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_summary(booking_id: int, version: int, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_summary_key(booking_id, version)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", "ok")
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except redis.RedisError as e:
        record_cache_operation("set", "error")
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_booking_summaries(booking_id: int) -> None:
    """Delete every cached summary version of one booking."""
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"summary:{booking_id}:*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", booking_id=booking_id, keys_deleted=deleted)
    except redis.RedisError as e:
        logger.error("cache_invalidation_error", booking_id=booking_id, error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except redis.RedisError as e:
        return {"status": "error", "error": str(e)}
