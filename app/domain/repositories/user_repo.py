# app/domain/repositories/user_repo.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

# password hashes never leave the repository unless explicitly asked for
_PUBLIC = {"password": 0}


class UserRepo:
    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "users"):
        self.col = db[collection_name]

    async def get(self, user_id: ObjectId, *, with_password: bool = False) -> Optional[dict]:
        return await self.col.find_one({"_id": user_id}, None if with_password else _PUBLIC)

    async def list_active(self, skip: int, limit: int) -> List[dict]:
        cursor = self.col.find({"is_active": True}, _PUBLIC).sort("created_at", -1).skip(skip).limit(limit)
        return [doc async for doc in cursor]

    async def count_active(self) -> int:
        return await self.col.count_documents({"is_active": True})

    async def find_by_email(self, email: str, exclude_id: Optional[ObjectId] = None) -> Optional[dict]:
        query: Dict[str, Any] = {"email": email.strip().lower()}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await self.col.find_one(query, _PUBLIC)

    async def update(self, user_id: ObjectId, changes: Dict[str, Any]) -> Optional[dict]:
        changes = {**changes, "updated_at": datetime.now(timezone.utc)}
        return await self.col.find_one_and_update(
            {"_id": user_id},
            {"$set": changes},
            projection=_PUBLIC,
            return_document=ReturnDocument.AFTER,
        )

    async def deactivate(self, user_id: ObjectId) -> None:
        await self.update(user_id, {"is_active": False})

    async def set_password(self, user_id: ObjectId, password_hash: str) -> None:
        await self.update(user_id, {"password": password_hash})
