# app/domain/repositories/product_search_repo.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorCollection

from app.domain.repositories.product_repo import category_lookup_stages
from app.domain.services.query_builder import (
    CatalogQuery,
    SortSpec,
    brands_predicate,
    contains_ci,
    price_range_pipeline,
)


class ProductSearchRepo:
    """
    Executes queries produced by the query builder against 'products':
    paged listing, counts and facet aggregates. Read-only.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col: AsyncIOMotorCollection = db[collection_name]

    # ---------- Listing ----------
    async def find_page(self, query: CatalogQuery) -> List[Dict[str, Any]]:
        return await self.find(query.predicate, query.sort, skip=query.skip, limit=query.limit)

    async def find(
        self,
        predicate: Dict[str, Any],
        sort: SortSpec,
        skip: int = 0,
        limit: int = 10,
    ) -> List[Dict[str, Any]]:
        # lookup after $limit so only the returned page is joined
        pipeline: List[Dict[str, Any]] = [
            {"$match": predicate},
            {"$sort": dict(sort)},
        ]
        if skip:
            pipeline.append({"$skip": skip})
        pipeline.append({"$limit": limit})
        pipeline += category_lookup_stages()

        cursor = self.col.aggregate(pipeline)
        return [doc async for doc in cursor]

    async def count(self, predicate: Dict[str, Any]) -> int:
        return await self.col.count_documents(predicate)

    # ---------- Facets ----------
    async def price_range(self, predicate: Dict[str, Any]) -> Optional[Dict[str, float]]:
        docs = await self.col.aggregate(price_range_pipeline(predicate)).to_list(length=1)
        return docs[0] if docs else None

    async def distinct_brands(self, predicate: Dict[str, Any]) -> List[Any]:
        return await self.col.distinct("brand", brands_predicate(predicate))

    # ---------- Suggestions ----------
    async def name_suggestions(self, text: str, limit: int) -> List[Dict[str, Any]]:
        cursor = (
            self.col.find({"is_active": True, "name": contains_ci(text)}, {"name": 1})
            .sort("name", 1)
            .limit(limit)
        )
        return [doc async for doc in cursor]

    async def brand_suggestions(self, text: str) -> List[Any]:
        return await self.col.distinct("brand", {"is_active": True, "brand": {**contains_ci(text), "$nin": [None, ""]}})
