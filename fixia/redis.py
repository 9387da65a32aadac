"""Redis connection pool. Only the rate limiter's token buckets live here."""

from collections.abc import AsyncGenerator

import redis.asyncio as aioredis

from fixia.config import settings

redis_pool = aioredis.ConnectionPool.from_url(
    settings.redis_url,
    max_connections=settings.redis_max_connections,
    socket_timeout=settings.redis_socket_timeout_seconds,
)


async def get_redis() -> AsyncGenerator[aioredis.Redis, None]:
    client = aioredis.Redis(connection_pool=redis_pool)
    try:
        yield client
    finally:
        await client.aclose()


async def close_redis_pool() -> None:
    await redis_pool.disconnect()
