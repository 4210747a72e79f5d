import logging
from typing import Any, Dict, List

from bson import ObjectId

from app.core.errors import Conflict, NotFound
from app.domain.models.product import Category, Product
from app.domain.services.query_builder import build_pagination, page_window, resolve_sort, active_predicate

logger = logging.getLogger(__name__)


async def list_categories_svc(category_repo) -> List[Category]:
    return [Category.model_validate(d) for d in await category_repo.list_active()]


async def get_category_svc(category_repo, category_id: ObjectId) -> Category:
    doc = await category_repo.get(category_id)
    if not doc or not doc.get("is_active", True):
        raise NotFound("Category not found")
    return Category.model_validate(doc)


async def create_category_svc(category_repo, payload, created_by: str) -> Category:
    if await category_repo.find_by_name(payload.name):
        raise Conflict("Category already exists")
    doc = await category_repo.insert(payload.name, payload.description, ObjectId(created_by))
    logger.info("category created category_id=%s name=%r", doc["_id"], payload.name)
    return Category.model_validate(doc)


async def update_category_svc(category_repo, category_id: ObjectId, payload) -> Category:
    existing = await category_repo.get(category_id)
    if not existing:
        raise NotFound("Category not found")

    changes: Dict[str, Any] = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if "name" in changes and changes["name"] != existing.get("name"):
        if await category_repo.find_by_name(changes["name"], exclude_id=category_id):
            raise Conflict("Category name already exists")

    updated = await category_repo.update(category_id, changes)
    if not updated:
        raise NotFound("Category not found")
    logger.info("category updated category_id=%s fields=%s", category_id, sorted(changes))
    return Category.model_validate(updated)


async def delete_category_svc(category_repo, product_repo, category_id: ObjectId) -> None:
    if not await category_repo.get(category_id):
        raise NotFound("Category not found")

    # any product, active or not, still points at it
    referenced = await product_repo.count_by_category(category_id)
    if referenced > 0:
        raise Conflict(f"Cannot delete category. It has {referenced} product(s) associated with it.")

    await category_repo.delete(category_id)
    logger.info("category deleted category_id=%s", category_id)


async def category_products_svc(category_repo, search_repo, category_id: ObjectId, page: int, limit: int) -> Dict[str, Any]:
    category = await get_category_svc(category_repo, category_id)

    predicate = {**active_predicate(), "category_id": category_id}
    skip, limit = page_window(page, limit)
    docs = await search_repo.find(predicate, resolve_sort(None), skip=skip, limit=limit)
    total = await search_repo.count(predicate)

    return {
        "category": category,
        "products": [Product.model_validate(d) for d in docs],
        "pagination": build_pagination(page, limit, total),
    }
