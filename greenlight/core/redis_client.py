"""
Redis client

Holds the key-value connection used for the schema version marker
"""

from typing import Optional

import redis.asyncio as redis

from greenlight.core.config import settings

# Module-level Redis client
_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Return the Redis client singleton"""
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )

    return _redis_client


async def close_redis():
    """Close the Redis connection"""
    global _redis_client

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
