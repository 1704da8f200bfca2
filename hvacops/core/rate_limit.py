import logging
from fastapi import HTTPException, Request
from hvacops.core.redis import get_redis
from hvacops.core.config import settings
from hvacops.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


async def check_rate_limit(request: Request):
    redis = get_redis()
    if redis is None:
        return

    client = client_key(request)
    key = f"rl:{client}"
    try:
        current = await redis.get(key)
        if current is None:
            await redis.set(key, "1", ex=settings.RATE_LIMIT_WINDOW)
            return
        count = int(current)
        if count < settings.RATE_LIMIT:
            await redis.incr(key)
            return
    except Exception as e:
        logger.warning(f"Rate limit check skipped: {e}")
        return

    rate_limit_exceeded.labels(client=client).inc()
    raise HTTPException(status_code=429, detail="Rate limit exceeded")
