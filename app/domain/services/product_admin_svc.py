import logging
from typing import Any, Dict, Optional

from bson import ObjectId

from app.core.errors import NotFound, ValidationFailed
from app.domain.models.product import Product
from app.domain.services.catalog_svc import FACETS_CACHE_KEY
from app.utils.cache import cache_delete

logger = logging.getLogger(__name__)

CLEARABLE_FIELDS = frozenset({"brand"})


def _counted_in(doc: Dict[str, Any]) -> Optional[ObjectId]:
    """Category whose product_count includes this product, if any (active products only)."""
    return doc.get("category_id") if doc.get("is_active", True) else None


async def _move_category_count(category_repo, before: Optional[ObjectId], after: Optional[ObjectId]) -> None:
    # Two independent $inc: a failure in between leaves the counters drifted
    # until the next reseed (eventually consistent by contract)
    if before == after:
        return
    if before is not None:
        await category_repo.increment_product_count(before, -1)
    if after is not None:
        await category_repo.increment_product_count(after, 1)


async def _require_category(category_repo, category_id: str) -> ObjectId:
    oid = ObjectId(category_id)
    if not await category_repo.get(oid):
        raise ValidationFailed("category", "Category not found")
    return oid


async def create_product_svc(product_repo, category_repo, redis, payload, created_by: str) -> Product:
    category_id = await _require_category(category_repo, payload.category)

    doc: Dict[str, Any] = {
        "name": payload.name,
        "description": payload.description,
        "base_price": payload.base_price,
        "current_price": payload.base_price,
        "stock": payload.stock,
        "category_id": category_id,
        "image": payload.image_url,
        "image_type": "url",
        "brand": payload.brand,
        "tags": payload.tags,
        "specifications": payload.specifications,
        "rating": 0,
        "review_count": 0,
        "is_active": True,
        "is_featured": payload.is_featured,
        "visit_count": 0,
        "created_by": ObjectId(created_by),
    }
    product_id = await product_repo.insert(doc)
    await _move_category_count(category_repo, None, _counted_in(doc))
    await cache_delete(redis, FACETS_CACHE_KEY)

    logger.info("product created product_id=%s category_id=%s base_price=%s", product_id, category_id, payload.base_price)
    created = await product_repo.get_with_category(product_id)
    return Product.model_validate(created)


async def update_product_svc(product_repo, category_repo, redis, product_id: ObjectId, payload) -> Product:
    existing = await product_repo.get(product_id)
    if not existing:
        raise NotFound("Product not found")

    changes: Dict[str, Any] = payload.model_dump(exclude_unset=True)
    if "category" in changes:
        changes["category_id"] = await _require_category(category_repo, changes.pop("category"))
    if "image_url" in changes:
        changes["image"] = changes.pop("image_url")
        changes["image_type"] = "url"
    # current_price always mirrors base_price
    if changes.get("base_price") is not None:
        changes["current_price"] = changes["base_price"]
    # an explicit null clears an optional field; elsewhere it means "unchanged"
    changes = {k: v for k, v in changes.items() if v is not None or k in CLEARABLE_FIELDS}

    updated = await product_repo.update(product_id, changes)
    if not updated:
        raise NotFound("Product not found")

    await _move_category_count(category_repo, _counted_in(existing), _counted_in(updated))
    await cache_delete(redis, FACETS_CACHE_KEY)

    logger.info("product updated product_id=%s fields=%s", product_id, sorted(changes))
    return Product.model_validate(await product_repo.get_with_category(product_id))


async def delete_product_svc(product_repo, category_repo, redis, product_id: ObjectId) -> None:
    existing = await product_repo.get(product_id)
    if not existing:
        raise NotFound("Product not found")

    if not await product_repo.delete(product_id):
        # removed by a concurrent request, which already moved the counter
        raise NotFound("Product not found")
    await _move_category_count(category_repo, _counted_in(existing), None)
    await cache_delete(redis, FACETS_CACHE_KEY)
    logger.info("product deleted product_id=%s", product_id)
