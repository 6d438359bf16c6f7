"""
Redis caching service for booking lookups.

CACHING STRATEGY
================

What we cache:
  - GET /booking responses (JSON-serialized BookingResponse)
  - Cache key pattern: "booking:user:{user_id}"

Invalidation strategy:
  - On create: delete the caller's key (404 may have been cached as absent)
  - On update: delete the caller's key (the room changed)
  - TTL-based expiry as safety net (REDIS_CACHE_TTL)

What we never cache:
  - Room occupancy. Capacity checks always count rows in PostgreSQL.

Failure mode:
  Redis is optional. When it is disabled or unreachable every helper here
  degrades to a no-op and reads go to the database.
"""

import json
from typing import Optional

import redis.asyncio as redis
from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.metrics import record_cache_operation, redis_connection_errors

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
        except Exception as e:
            redis_connection_errors.inc()
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


def _make_booking_key(user_id: int) -> str:
    return f"booking:user:{user_id}"


async def get_cached_booking(user_id: int) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_booking_key(user_id)
    try:
        data = await client.get(key)
        if data:
            record_cache_operation("get", "hit")
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        record_cache_operation("get", "miss")
        logger.debug("cache_miss", key=key)
    except Exception as e:
        record_cache_operation("get", "error")
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_booking(user_id: int, data: dict) -> None:
    """Cache a booking response with TTL."""
    client = await get_redis()
    if not client:
        return

    key = _make_booking_key(user_id)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        record_cache_operation("set", "ok")
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        record_cache_operation("set", "error")
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_booking_cache(user_id: int) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_booking_key(user_id)
    try:
        await client.delete(key)
        record_cache_operation("invalidate", "ok")
        logger.info("cache_invalidated", key=key)
    except Exception as e:
        record_cache_operation("invalidate", "error")
        logger.error("cache_invalidation_error", key=key, error=str(e))


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
    except Exception as e:
        return {"status": "error", "error": str(e)}
