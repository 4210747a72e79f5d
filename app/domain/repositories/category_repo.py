# app/domain/repositories/category_repo.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import re

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.domain.services.query_builder import contains_ci


def slugify(name: str) -> str:
    s = re.sub(r"[^a-z0-9]+", "-", name.strip().lower())
    return s.strip("-")


class CategoryRepo:
    """
    'categories' collection. `name_lower` backs the case-insensitive unique name;
    `product_count` is a denormalized counter maintained with $inc.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "categories"):
        self.col = db[collection_name]

    async def list_active(self) -> List[dict]:
        cursor = self.col.find({"is_active": True}).sort("name", 1)
        return [doc async for doc in cursor]

    async def get(self, category_id: ObjectId) -> Optional[dict]:
        return await self.col.find_one({"_id": category_id})

    async def find_by_name(self, name: str, exclude_id: Optional[ObjectId] = None) -> Optional[dict]:
        query: Dict[str, Any] = {"name_lower": name.strip().lower()}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await self.col.find_one(query)

    async def insert(self, name: str, description: Optional[str], created_by: Optional[ObjectId]) -> dict:
        now = datetime.now(timezone.utc)
        doc = {
            "name": name,
            "name_lower": name.strip().lower(),
            "slug": slugify(name),
            "description": description,
            "product_count": 0,
            "is_active": True,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
        res = await self.col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return doc

    async def update(self, category_id: ObjectId, changes: Dict[str, Any]) -> Optional[dict]:
        changes = dict(changes)
        if "name" in changes:
            changes["name_lower"] = changes["name"].strip().lower()
            changes["slug"] = slugify(changes["name"])
        changes["updated_at"] = datetime.now(timezone.utc)
        return await self.col.find_one_and_update(
            {"_id": category_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, category_id: ObjectId) -> bool:
        res = await self.col.delete_one({"_id": category_id})
        return res.deleted_count == 1

    async def increment_product_count(self, category_id: ObjectId, delta: int) -> None:
        await self.col.update_one({"_id": category_id}, {"$inc": {"product_count": delta}})

    async def name_suggestions(self, text: str, limit: int) -> List[dict]:
        cursor = self.col.find({"is_active": True, "name": contains_ci(text)}, {"name": 1}).limit(limit)
        return [doc async for doc in cursor]
