# app/api/v1/routers/search.py
from fastapi import APIRouter, Depends, Query
from typing import List
import time
import logging

from app.api.deps import category_repo_dep, product_search_repo_dep, redis_dep
from app.api.v1.params import catalog_filters_dep
from app.core.config import get_settings
from app.core.errors import ValidationFailed
from app.domain.models.product import AdvancedSearchResult, Product
from app.domain.services.catalog_svc import advanced_search_svc, search_products_svc, suggestions_svc
from app.domain.services.constants import ADVANCED_LIMIT, SEARCH_LIMIT, SUGGESTIONS_LIMIT
from app.domain.services.query_builder import CatalogFilters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


def _required_query(q: str) -> str:
    q = q.strip()
    if not q:
        raise ValidationFailed("q", "Search query is required")
    return q


@router.get("/products", response_model=List[Product])
async def search_products(
    q: str = Query(..., min_length=1, description="Search query"),
    limit: int = Query(SEARCH_LIMIT[0], ge=1, le=SEARCH_LIMIT[1]),
    search_repo = Depends(product_search_repo_dep),
):
    q = _required_query(q)
    logger.info("Request: search_products q=%r limit=%s", q, limit)
    return await search_products_svc(search_repo, q, limit)


@router.get("/suggestions")
async def search_suggestions(
    q: str = Query(..., min_length=1, description="Search query"),
    limit: int = Query(SUGGESTIONS_LIMIT[0], ge=1, le=SUGGESTIONS_LIMIT[1]),
    search_repo = Depends(product_search_repo_dep),
    category_repo = Depends(category_repo_dep),
):
    return await suggestions_svc(search_repo, category_repo, _required_query(q), limit)


@router.get("/advanced", response_model=AdvancedSearchResult)
async def advanced_search(
    filters: CatalogFilters = Depends(catalog_filters_dep(ADVANCED_LIMIT, text_param="q")),
    search_repo = Depends(product_search_repo_dep),
    redis = Depends(redis_dep),
):
    """
    Filtered, paged search plus facets (price range and brands of all active products).
    """
    logger.info("Request: advanced_search filters=%s", filters.model_dump(exclude_defaults=True))
    t0 = time.perf_counter()
    res = await advanced_search_svc(search_repo, redis, filters, get_settings().facets_cache_ttl)
    logger.info(
        "Response: advanced_search count=%s total=%s brands=%s elapsed_time=%.4fs",
        len(res.products), res.pagination.total_products, len(res.filters.brands), time.perf_counter() - t0,
    )
    return res
