# app/domain/services/query_builder.py
"""
Turns validated listing/search parameters into a Mongo query:
predicate document + sort spec + pagination window, plus the
predicate and post-processing used by the search facets.

No I/O here; repositories execute what this module builds.
"""
from __future__ import annotations
import math
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from app.domain.models.product import Pagination
from app.domain.services.constants import DEFAULT_SORT, SORT_FIELDS, TEXT_SEARCH_FIELDS
from app.utils.ids import is_object_id

SortSpec = List[Tuple[str, int]]


class CatalogFilters(BaseModel):
    """Normalized filter/search request. Built once per request by the router."""
    search: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    brand: Optional[str] = None
    in_stock: bool = False
    featured: bool = False
    sort: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1)

    model_config = ConfigDict(frozen=True)


class CatalogQuery(BaseModel):
    predicate: Dict[str, Any]
    sort: SortSpec
    skip: int
    limit: int

    model_config = ConfigDict(frozen=True)


def active_predicate() -> Dict[str, Any]:
    return {"is_active": True}


def contains_ci(text: str) -> Dict[str, Any]:
    """Case-insensitive substring match. User text is escaped, never used as a raw regex."""
    return {"$regex": re.escape(text), "$options": "i"}


def text_search_clause(text: str) -> Dict[str, Any]:
    """name OR description OR brand OR any tag contains `text`."""
    ors: List[Dict[str, Any]] = [{field: contains_ci(text)} for field in TEXT_SEARCH_FIELDS]
    ors.append({"tags": contains_ci(text)})  # regex on an array matches any element
    return {"$or": ors}


def build_predicate(f: CatalogFilters) -> Dict[str, Any]:
    predicate: Dict[str, Any] = active_predicate()

    if is_object_id(f.category):
        predicate["category_id"] = ObjectId(f.category)

    # min > max is not rejected: the range simply matches nothing
    price: Dict[str, float] = {}
    if f.min_price is not None:
        price["$gte"] = f.min_price
    if f.max_price is not None:
        price["$lte"] = f.max_price
    if price:
        predicate["current_price"] = price

    if f.in_stock:
        predicate["stock"] = {"$gt": 0}

    if f.featured:
        predicate["is_featured"] = True

    if f.brand:
        predicate["brand"] = contains_ci(f.brand)

    if f.search:
        predicate.update(text_search_clause(f.search))

    return predicate


def resolve_sort(sort_key: Optional[str]) -> SortSpec:
    """
    Map a sort key to a Mongo sort spec. Unknown or missing keys fall back to
    newest-first. `_id` breaks ties so pages do not overlap.
    """
    field, direction = SORT_FIELDS.get(sort_key or DEFAULT_SORT, SORT_FIELDS[DEFAULT_SORT])
    return [(field, direction), ("_id", direction)]


def page_window(page: int, limit: int) -> Tuple[int, int]:
    return (page - 1) * limit, limit


def build_query(f: CatalogFilters) -> CatalogQuery:
    skip, limit = page_window(f.page, f.limit)
    return CatalogQuery(predicate=build_predicate(f), sort=resolve_sort(f.sort), skip=skip, limit=limit)


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(
        current_page=page,
        total_pages=math.ceil(total / limit) if limit else 0,
        total_products=total,
        has_next_page=page * limit < total,
        has_prev_page=page > 1,
    )


# ---------- Facets ----------

def facet_predicate() -> Dict[str, Any]:
    """
    Population for the advanced-search facets: every active product,
    deliberately NOT narrowed by the request's other filters.
    """
    return active_predicate()


def price_range_pipeline(predicate: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {"$match": predicate},
        {"$group": {"_id": None, "min_price": {"$min": "$current_price"}, "max_price": {"$max": "$current_price"}}},
        {"$project": {"_id": 0, "min_price": 1, "max_price": 1}},
    ]


def brands_predicate(predicate: Dict[str, Any]) -> Dict[str, Any]:
    return {**predicate, "brand": {"$nin": [None, ""]}}


def normalize_brands(values: Iterable[Any]) -> List[str]:
    """Distinct, non-empty, lexicographically sorted."""
    return sorted({v for v in values if isinstance(v, str) and v.strip()})
