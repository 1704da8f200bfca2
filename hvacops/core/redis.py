import logging
from typing import Optional
from redis.asyncio import Redis
from hvacops.core.config import settings
from hvacops.core.resources import ResourceProvider

logger = logging.getLogger(__name__)


async def _connect() -> Redis:
    client = Redis.from_url(settings.REDIS_URL, decode_responses=False)
    try:
        await client.ping()
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        await client.aclose()
        raise
    logger.info("Connected to Redis")
    return client


async def _close(client: Redis) -> None:
    await client.aclose()


redis_provider: ResourceProvider[Redis] = ResourceProvider("Redis", _connect, _close)


async def init_redis() -> Redis:
    return await redis_provider.acquire()


async def close_redis():
    await redis_provider.close()


def get_redis() -> Optional[Redis]:
    """Connected client, or None when Redis has not been brought up."""
    return redis_provider.current()
