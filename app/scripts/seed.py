# app/scripts/seed.py
"""
Reload a small demo catalog: wipes products and categories, recomputes the
denormalized category product counts, drops the cached search facets and
makes sure an admin user exists.

    python -m app.scripts.seed
"""
import asyncio
import logging
import os
from collections import Counter
from datetime import datetime, timedelta, timezone

from app.core.logging import configure_logging
from app.core.security import hash_password
from app.db import mongo
from app.db import redis as redis_db
from app.domain.repositories.category_repo import slugify
from app.domain.services.catalog_svc import FACETS_CACHE_KEY
from app.domain.services.constants import ROLE_ADMIN
from app.utils.cache import cache_delete

logger = logging.getLogger("app.scripts.seed")

CATEGORIES = [
    ("Electronics", "Latest electronic gadgets and devices"),
    ("Clothing", "Fashion and apparel for all occasions"),
    ("Home & Kitchen", "Everything for your home and kitchen needs"),
    ("Books", "Wide collection of books and literature"),
    ("Sports & Outdoors", "Sports equipment and outdoor gear"),
]

# (name, category, brand, base_price, stock, rating, featured, tags)
PRODUCTS = [
    ("Wireless Noise-Cancelling Headphones", "Electronics", "SoundMax", 89.99, 45, 4.5, True, ["audio", "wireless", "bluetooth"]),
    ("4K Ultra HD Smart TV 55\"", "Electronics", "VisionPro", 549.00, 12, 4.3, True, ["tv", "4k", "smart"]),
    ("Mechanical Gaming Keyboard", "Electronics", "KeyForge", 119.50, 0, 4.6, False, ["gaming", "keyboard", "rgb"]),
    ("Organic Cotton T-Shirt", "Clothing", "EarthWear", 24.99, 200, 4.1, False, ["cotton", "organic", "casual"]),
    ("Waterproof Hiking Jacket", "Clothing", "TrailPeak", 139.00, 30, 4.7, True, ["outdoor", "waterproof", "jacket"]),
    ("Stainless Steel Chef Knife", "Home & Kitchen", "CutRight", 59.95, 80, 4.8, False, ["kitchen", "knife", "steel"]),
    ("Programmable Coffee Maker", "Home & Kitchen", "BrewMaster", 79.00, 25, 4.0, True, ["coffee", "kitchen", "appliance"]),
    ("The Pragmatic Programmer", "Books", "", 42.50, 60, 4.9, False, ["programming", "software"]),
    ("Yoga Mat with Carry Strap", "Sports & Outdoors", "FlexFit", 29.99, 150, 4.4, False, ["yoga", "fitness", "mat"]),
    ("Carbon Fiber Trekking Poles", "Sports & Outdoors", "TrailPeak", 74.90, 18, 4.2, False, ["hiking", "outdoor"]),
]


async def seed_catalog(db, redis) -> None:
    now = datetime.now(timezone.utc)

    await db["products"].delete_many({})
    await db["categories"].delete_many({})
    logger.info("Existing catalog cleared")

    category_docs = [
        {
            "name": name,
            "name_lower": name.lower(),
            "slug": slugify(name),
            "description": description,
            "product_count": 0,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }
        for name, description in CATEGORIES
    ]
    res = await db["categories"].insert_many(category_docs)
    category_ids = dict(zip((c[0] for c in CATEGORIES), res.inserted_ids))
    logger.info("Created %s categories", len(category_ids))

    product_docs = []
    for i, (name, category, brand, price, stock, rating, featured, tags) in enumerate(PRODUCTS):
        created = now - timedelta(days=len(PRODUCTS) - i)
        product_docs.append({
            "name": name,
            "description": f"{name} from the {category} range.",
            "base_price": price,
            "current_price": price,
            "stock": stock,
            "category_id": category_ids[category],
            "image": f"https://picsum.photos/seed/{slugify(name)}/600/600",
            "image_type": "url",
            "brand": brand or None,
            "rating": rating,
            "review_count": int(rating * 37),
            "is_active": True,
            "is_featured": featured,
            "tags": tags,
            "specifications": {},
            "visit_count": 0,
            "created_at": created,
            "updated_at": created,
        })
    await db["products"].insert_many(product_docs)
    logger.info("Created %s products", len(product_docs))

    counts = Counter(p["category_id"] for p in product_docs if p["is_active"])
    for category_id, count in counts.items():
        await db["categories"].update_one({"_id": category_id}, {"$set": {"product_count": count}})
    logger.info("Category product counts updated")

    admin_email = os.getenv("SEED_ADMIN_EMAIL", "admin@store.com")
    if not await db["users"].find_one({"email": admin_email}):
        await db["users"].insert_one({
            "name": "Admin",
            "email": admin_email,
            "password": hash_password(os.getenv("SEED_ADMIN_PASSWORD", "admin123")),
            "role": ROLE_ADMIN,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        })
        logger.info("Admin user created (%s)", admin_email)

    # facets were computed from the previous catalog
    await cache_delete(redis, FACETS_CACHE_KEY)


async def seed() -> None:
    await mongo.connect()
    await redis_db.connect()
    try:
        await seed_catalog(mongo.get_db(), redis_db.get_redis())
    finally:
        await redis_db.disconnect()
        await mongo.disconnect()
    logger.info("Seeding completed")


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed())
