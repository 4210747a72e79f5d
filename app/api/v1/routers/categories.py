# app/api/v1/routers/categories.py
from fastapi import APIRouter, Depends, Query
from typing import List
import logging

from app.api.deps import category_repo_dep, parse_object_id, product_repo_dep, product_search_repo_dep
from app.api.v1.schemas.catalog import CategoryIn, CategoryUpdate, MessageOut
from app.core.security import Principal, require_admin
from app.domain.models.product import Category
from app.domain.services.category_svc import (
    category_products_svc,
    create_category_svc,
    delete_category_svc,
    get_category_svc,
    list_categories_svc,
    update_category_svc,
)
from app.domain.services.constants import LIST_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[Category])
async def list_categories(category_repo = Depends(category_repo_dep)):
    return await list_categories_svc(category_repo)


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: str, category_repo = Depends(category_repo_dep)):
    oid = parse_object_id(category_id, "id", "category ID")
    return await get_category_svc(category_repo, oid)


@router.post("", status_code=201)
async def create_category(
    payload: CategoryIn,
    admin: Principal = Depends(require_admin),
    category_repo = Depends(category_repo_dep),
):
    category = await create_category_svc(category_repo, payload, created_by=admin.user_id)
    return {"message": "Category created successfully", "category": category.model_dump(by_alias=True, mode="json")}


@router.put("/{category_id}")
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    admin: Principal = Depends(require_admin),
    category_repo = Depends(category_repo_dep),
):
    oid = parse_object_id(category_id, "id", "category ID")
    category = await update_category_svc(category_repo, oid, payload)
    return {"message": "Category updated successfully", "category": category.model_dump(by_alias=True, mode="json")}


@router.delete("/{category_id}", response_model=MessageOut)
async def delete_category(
    category_id: str,
    admin: Principal = Depends(require_admin),
    category_repo = Depends(category_repo_dep),
    product_repo = Depends(product_repo_dep),
):
    oid = parse_object_id(category_id, "id", "category ID")
    await delete_category_svc(category_repo, product_repo, oid)
    return {"message": "Category deleted successfully"}


@router.get("/{category_id}/products")
async def category_products(
    category_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(LIST_LIMIT[0], ge=1, le=LIST_LIMIT[1]),
    category_repo = Depends(category_repo_dep),
    search_repo = Depends(product_search_repo_dep),
):
    oid = parse_object_id(category_id, "id", "category ID")
    res = await category_products_svc(category_repo, search_repo, oid, page, limit)
    return {
        "category": res["category"].model_dump(by_alias=True, mode="json"),
        "products": [p.model_dump(by_alias=True, mode="json") for p in res["products"]],
        "pagination": res["pagination"].model_dump(by_alias=True),
    }
