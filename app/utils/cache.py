import json
import logging
from typing import Any, Optional
from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Best-effort JSON cache: a missing or failing Redis degrades to a cache miss


async def cache_get(redis: Optional[Redis], key: str) -> Any:
    if redis is None:
        return None
    try:
        if val := await redis.get(key):
            return json.loads(val)
    except Exception as e:
        logger.warning("cache_get failed key=%s err=%s", key, e)
    return None


async def cache_set(redis: Optional[Redis], key: str, value, ex: int = 60) -> None:
    if redis is None:
        return
    try:
        await redis.set(key, json.dumps(value, default=str), ex=ex)
    except Exception as e:
        logger.warning("cache_set failed key=%s err=%s", key, e)


async def cache_delete(redis: Optional[Redis], key: str) -> None:
    if redis is None:
        return
    try:
        await redis.delete(key)
    except Exception as e:
        logger.warning("cache_delete failed key=%s err=%s", key, e)
