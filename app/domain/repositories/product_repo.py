# app/domain/repositories/product_repo.py

from __future__ import annotations
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument


def category_lookup_stages() -> List[Dict[str, Any]]:
    """Embed the referenced category as `category` (null when it no longer exists)."""
    return [
        {
            "$lookup": {
                "from": "categories",
                "localField": "category_id",
                "foreignField": "_id",
                "as": "category",
            }
        },
        {"$unwind": {"path": "$category", "preserveNullAndEmptyArrays": True}},
    ]


class ProductRepo:
    """
    Product repository backed by the 'products' collection.
    Single-document reads/writes; listing and facet queries live in ProductSearchRepo.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    async def get(self, product_id: ObjectId) -> Optional[dict]:
        return await self.col.find_one({"_id": product_id})

    async def get_with_category(self, product_id: ObjectId, *, active_only: bool = False) -> Optional[dict]:
        match: Dict[str, Any] = {"_id": product_id}
        if active_only:
            match["is_active"] = True
        pipeline = [{"$match": match}, *category_lookup_stages(), {"$limit": 1}]
        docs = await self.col.aggregate(pipeline).to_list(length=1)
        return docs[0] if docs else None

    async def increment_visit_count(self, product_id: ObjectId) -> None:
        """Global view counter: server-side $inc, safe under concurrent views."""
        await self.col.update_one({"_id": product_id}, {"$inc": {"visit_count": 1}})

    async def featured(self, limit: int) -> List[dict]:
        pipeline = [
            {"$match": {"is_active": True, "is_featured": True}},
            {"$sort": {"created_at": -1}},
            {"$limit": limit},
            *category_lookup_stages(),
        ]
        return await self.col.aggregate(pipeline).to_list(length=limit)

    async def count_by_category(self, category_id: ObjectId) -> int:
        return await self.col.count_documents({"category_id": category_id})

    # ----- Admin writes ------------------------------------------------------

    async def insert(self, doc: Dict[str, Any]) -> ObjectId:
        now = datetime.now(timezone.utc)
        doc = {**doc, "created_at": now, "updated_at": now}
        res = await self.col.insert_one(doc)
        return res.inserted_id

    async def update(self, product_id: ObjectId, changes: Dict[str, Any]) -> Optional[dict]:
        changes = {**changes, "updated_at": datetime.now(timezone.utc)}
        return await self.col.find_one_and_update(
            {"_id": product_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, product_id: ObjectId) -> bool:
        res = await self.col.delete_one({"_id": product_id})
        return res.deleted_count == 1
