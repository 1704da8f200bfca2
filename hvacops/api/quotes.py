"""Installation quote endpoint with Redis caching"""
import json
import hashlib
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from hvacops.api.price_table import load_price_rows
from hvacops.schemas.quote import QuoteRequest, QuoteResponse
from hvacops.services.pricing import UnknownModelError, calculate_quote
from hvacops.core.redis import get_redis
from hvacops.core.config import settings
from hvacops.core.metrics import cache_hits, cache_misses
from hvacops.db.session import get_db

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


def _generate_cache_key(req: QuoteRequest) -> str:
    params_str = json.dumps(req.model_dump(), sort_keys=True)
    return f"price:{hashlib.sha256(params_str.encode()).hexdigest()}"


@router.post("/calc", response_model=QuoteResponse)
async def calc_quote(req: QuoteRequest, db: AsyncSession = Depends(get_db)):

    cache_key = _generate_cache_key(req)
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                cache_hits.labels(cache="quote").inc()
                return QuoteResponse.model_validate(json.loads(cached))
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")
        cache_misses.labels(cache="quote").inc()

    rows = await load_price_rows(db)
    try:
        result = await calculate_quote(req, rows)
    except UnknownModelError as e:
        raise HTTPException(status_code=404, detail=f"SET model {e.model} not in price table")

    if redis is not None:
        try:
            await redis.set(
                cache_key,
                json.dumps(result.model_dump(mode="json")),
                ex=settings.PRICE_CACHE_TTL
            )
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return result
