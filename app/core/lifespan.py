# app/core/lifespan.py
from contextlib import asynccontextmanager
from fastapi import FastAPI
from app.db import mongo, redis as r
from app.core.config import get_settings

import logging
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Mongo is mandatory: the catalog has no other source of truth
    try:
        await mongo.connect()
    except Exception as e:
        logger.error("Mongo connection failed: %s", e)
        raise

    # Redis is optional (visit ledger falls back to the session cookie)
    await r.connect()

    logger.info("%s started env=%s redis=%s", settings.APP_NAME, settings.APP_ENV, r.get_redis() is not None)

    yield

    # --- Shutdown ---
    try:
        await r.disconnect()
    except Exception as e:
        logger.warning("Redis disconnect failed: %s", e)

    await mongo.disconnect()
    logger.info("Mongo disconnected")
