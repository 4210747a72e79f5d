# app/db/mongo.py
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from app.core.config import get_settings
import certifi

import logging
logger = logging.getLogger(__name__)

settings = get_settings()

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient:
    assert _client is not None, "Mongo client not initialized"
    return _client


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


def _new_client() -> AsyncIOMotorClient:
    # Atlas (mongodb+srv://) needs TLS and an explicit CA bundle inside containers;
    # a local mongod usually runs without TLS.
    use_tls = settings.MONGO_URI.startswith("mongodb+srv://")
    opts = dict(
        uuidRepresentation="standard",
        serverSelectionTimeoutMS=6000,
        connectTimeoutMS=6000,
    )
    if use_tls:
        opts.update(tls=True, tlsCAFile=certifi.where())
    return AsyncIOMotorClient(settings.MONGO_URI, **opts)


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Indexes backing the listing predicates and sort keys."""
    products = db["products"]
    await products.create_index([("is_active", ASCENDING), ("created_at", DESCENDING)])
    await products.create_index([("category_id", ASCENDING)])
    await products.create_index([("current_price", ASCENDING)])
    await products.create_index([("is_featured", ASCENDING)])
    await products.create_index([("brand", ASCENDING)])
    await db["categories"].create_index([("name_lower", ASCENDING)], unique=True)
    await db["users"].create_index([("email", ASCENDING)], unique=True)


async def connect():
    """
    Create the Motor client.
    Do not crash the app if the initial ping fails: keep a lazy client so
    requests can retry once the network is OK.
    """
    global _client, _db

    try:
        _client = _new_client()
        _db = _client[settings.MONGO_DB]
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok) db=%s", settings.MONGO_DB)
    except Exception as e:
        logger.warning("Mongo ping at startup failed: %s", e)
        try:
            # keep a lazy client; first real query will attempt to connect again
            _client = _new_client()
            _db = _client[settings.MONGO_DB]
            logger.warning("Mongo will attempt lazy connection on first query")
        except Exception as e2:
            # as a last resort, keep None; routes that need DB will assert
            _client = None
            _db = None
            logger.error("Mongo client init failed: %s", e2)
        return

    try:
        await ensure_indexes(_db)
        logger.info("Mongo indexes ensured")
    except Exception as e:
        # queries still work without them, only slower; duplicates are not rejected
        logger.warning("Mongo index creation failed, continuing without them: %s", e)


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
