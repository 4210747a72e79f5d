# app/db/redis.py
import redis.asyncio as redis
from app.core.config import get_settings

import logging
logger = logging.getLogger(__name__)

settings = get_settings()
redis_client: redis.Redis | None = None


async def connect():
    """
    Connect Redis if REDIS_URL is set.
    Without it (or if unreachable) the visit ledger falls back to the cookie
    session and the facet cache is disabled; the app keeps running.
    """
    global redis_client
    if not settings.REDIS_URL:
        logger.warning("No REDIS_URL configured, visit ledger will live in the session cookie")
        redis_client = None
        return

    try:
        logger.info("Connecting to Redis at %s", settings.REDIS_URL)
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        await redis_client.ping()
        logger.info("Redis connection successful")
    except Exception as e:
        logger.warning("Failed to connect to Redis: %s", e)
        redis_client = None


async def disconnect():
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis disconnected")


def get_redis() -> redis.Redis | None:
    """
    Returns None when Redis is not configured or unavailable.
    Callers must handle the None case.
    """
    return redis_client
