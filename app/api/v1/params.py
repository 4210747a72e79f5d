# app/api/v1/params.py
from typing import Optional, Tuple

from fastapi import Query

from app.core.errors import ValidationFailed
from app.domain.services.query_builder import CatalogFilters
from app.utils.ids import is_object_id


def catalog_filters_dep(limits: Tuple[int, int], *, text_param: str = "search"):
    """
    Build a dependency parsing the listing/search query string into CatalogFilters.
    `limits` is (default, max) page size for the endpoint; `text_param` is the
    name of the free-text parameter ('search' on listings, 'q' on search).
    Bad numbers/booleans/limits are rejected by FastAPI (400 via our handler);
    an unknown sort key is accepted and falls back to newest-first.
    """
    default_limit, max_limit = limits

    def _dep(
        page: int = Query(1, ge=1, description="1-based page number"),
        limit: int = Query(default_limit, ge=1, le=max_limit, description="Page size"),
        category: Optional[str] = Query(None, description="Category id"),
        min_price: Optional[float] = Query(None, alias="minPrice", ge=0, allow_inf_nan=False),
        max_price: Optional[float] = Query(None, alias="maxPrice", ge=0, allow_inf_nan=False),
        brand: Optional[str] = Query(None, description="Case-insensitive brand substring"),
        in_stock: bool = Query(False, alias="inStock"),
        featured: bool = Query(False),
        sort: Optional[str] = Query(None, description="newest | price-low | price-high | name | rating"),
        text: Optional[str] = Query(None, alias=text_param, description="Free-text search"),
    ) -> CatalogFilters:
        if category and not is_object_id(category):
            raise ValidationFailed("category", "Invalid category ID")
        return CatalogFilters(
            search=(text or "").strip() or None,
            category=category or None,
            min_price=min_price,
            max_price=max_price,
            brand=(brand or "").strip() or None,
            in_stock=in_stock,
            featured=featured,
            sort=sort,
            page=page,
            limit=limit,
        )

    return _dep
