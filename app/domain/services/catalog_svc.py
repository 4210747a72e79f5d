import logging
import time
import json
from typing import Any, Dict, List, Optional

from app.domain.models.product import (
    AdvancedSearchResult,
    PriceRange,
    Product,
    ProductPage,
    SearchFacets,
)
from app.domain.services.query_builder import (
    CatalogFilters,
    build_pagination,
    build_query,
    facet_predicate,
    normalize_brands,
    text_search_clause,
    active_predicate,
)
from app.utils.cache import cache_get, cache_set

logger = logging.getLogger(__name__)

FACETS_CACHE_KEY = "catalog:facets:v1"


def _json_preview(obj: Any, limit: int = 1000) -> str:
    """Minify and truncate JSON for debug logs."""
    try:
        s = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, default=str)
        return s if len(s) <= limit else s[:limit] + "…[truncated]"
    except Exception:
        return "<unserializable>"


async def list_products_svc(search_repo, filters: CatalogFilters) -> ProductPage:
    t0 = time.perf_counter()
    query = build_query(filters)
    logger.debug("list_products predicate=%s sort=%s skip=%s limit=%s",
                 _json_preview(query.predicate), query.sort, query.skip, query.limit)

    db_t0 = time.perf_counter()
    docs = await search_repo.find_page(query)
    total = await search_repo.count(query.predicate)
    db_dt = time.perf_counter() - db_t0
    logger.info("list_products db_ok items=%s total=%s db_time=%.3fs", len(docs), total, db_dt)

    page = ProductPage(
        products=[Product.model_validate(d) for d in docs],
        pagination=build_pagination(filters.page, filters.limit, total),
    )
    logger.info("list_products done total_time=%.3fs", time.perf_counter() - t0)
    return page


async def get_facets_svc(search_repo, redis, cache_ttl: int) -> SearchFacets:
    """
    Price range and distinct brands over ALL active products (not narrowed by
    the request filters). Cached briefly in Redis when available.
    """
    cached = await cache_get(redis, FACETS_CACHE_KEY)
    if cached:
        logger.debug("facets cache_hit key=%s", FACETS_CACHE_KEY)
        return SearchFacets.model_validate(cached)

    predicate = facet_predicate()
    price = await search_repo.price_range(predicate)
    brands = normalize_brands(await search_repo.distinct_brands(predicate))

    facets = SearchFacets(
        price_range=PriceRange(**price) if price else PriceRange(),
        brands=brands,
    )
    await cache_set(redis, FACETS_CACHE_KEY, facets.model_dump(), ex=cache_ttl)
    logger.info("facets computed brands=%s price_range=%s", len(brands), price)
    return facets


async def advanced_search_svc(search_repo, redis, filters: CatalogFilters, cache_ttl: int) -> AdvancedSearchResult:
    page = await list_products_svc(search_repo, filters)
    facets = await get_facets_svc(search_repo, redis, cache_ttl)
    return AdvancedSearchResult(products=page.products, pagination=page.pagination, filters=facets)


async def search_products_svc(search_repo, q: str, limit: int) -> List[Product]:
    """Quick search box: active products whose text fields contain `q`, by name."""
    predicate = {**active_predicate(), **text_search_clause(q)}
    docs = await search_repo.find(predicate, [("name", 1)], limit=limit)
    logger.info("search_products q=%r items=%s", q, len(docs))
    return [Product.model_validate(d) for d in docs]


async def suggestions_svc(search_repo, category_repo, q: str, limit: int) -> Dict[str, List[Dict[str, Optional[str]]]]:
    """Typed autocomplete entries: product names, category names, brands."""
    side_limit = limit // 2

    products = await search_repo.name_suggestions(q, limit)
    categories = await category_repo.name_suggestions(q, side_limit) if side_limit else []
    brands = normalize_brands(await search_repo.brand_suggestions(q))[:side_limit]

    return {
        "products": [{"type": "product", "value": p["name"], "id": str(p["_id"])} for p in products],
        "categories": [{"type": "category", "value": c["name"], "id": str(c["_id"])} for c in categories],
        "brands": [{"type": "brand", "value": b} for b in brands],
    }


async def featured_products_svc(product_repo, limit: int) -> List[Product]:
    docs = await product_repo.featured(limit)
    return [Product.model_validate(d) for d in docs]
