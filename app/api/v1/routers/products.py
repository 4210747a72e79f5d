# app/api/v1/routers/products.py

from fastapi import APIRouter, Depends
from typing import List
import time

from app.api.deps import (
    category_repo_dep,
    parse_object_id,
    product_repo_dep,
    product_search_repo_dep,
    redis_dep,
    visit_ledger_dep,
)
from app.api.v1.params import catalog_filters_dep
from app.api.v1.schemas.catalog import MessageOut, ProductIn, ProductUpdate
from app.core.security import Principal, require_admin
from app.domain.models.product import Product, ProductDetail, ProductPage
from app.domain.services.catalog_svc import featured_products_svc, list_products_svc
from app.domain.services.constants import FEATURED_LIMIT, LIST_LIMIT
from app.domain.services.product_admin_svc import create_product_svc, delete_product_svc, update_product_svc
from app.domain.services.product_detail_svc import get_product_detail_svc
from app.domain.services.query_builder import CatalogFilters

import logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["products"])


@router.get("/products", response_model=ProductPage, summary="List active products with filters and pagination")
async def list_products(
    filters: CatalogFilters = Depends(catalog_filters_dep(LIST_LIMIT)),
    search_repo = Depends(product_search_repo_dep),
):
    logger.info("Request: list_products filters=%s", filters.model_dump(exclude_defaults=True))
    t0 = time.perf_counter()
    page = await list_products_svc(search_repo, filters)
    logger.info(
        "Response: list_products count=%s total=%s elapsed_time=%.4fs",
        len(page.products), page.pagination.total_products, time.perf_counter() - t0,
    )
    return page


@router.get("/products/featured/list", response_model=List[Product])
async def featured_products(product_repo = Depends(product_repo_dep)):
    return await featured_products_svc(product_repo, FEATURED_LIMIT)


@router.get("/products/{product_id}", response_model=ProductDetail)
async def get_product(
    product_id: str,
    product_repo = Depends(product_repo_dep),
    ledger = Depends(visit_ledger_dep),
):
    """
    Product detail with the session-adjusted `dynamicPrice`.
    Each call counts as one view for this session and one global view.
    """
    oid = parse_object_id(product_id, "id", "product ID")
    t0 = time.perf_counter()
    detail = await get_product_detail_svc(product_repo, ledger, oid)
    logger.info(
        "Response: get_product product_id=%s user_visits=%s dynamic_price=%s elapsed_time=%.4fs",
        product_id, detail.user_visits, detail.dynamic_price, time.perf_counter() - t0,
    )
    return detail


@router.post("/products", status_code=201)
async def create_product(
    payload: ProductIn,
    admin: Principal = Depends(require_admin),
    product_repo = Depends(product_repo_dep),
    category_repo = Depends(category_repo_dep),
    redis = Depends(redis_dep),
):
    product = await create_product_svc(product_repo, category_repo, redis, payload, created_by=admin.user_id)
    return {"message": "Product created successfully", "product": product.model_dump(by_alias=True, mode="json")}


@router.put("/products/{product_id}")
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    admin: Principal = Depends(require_admin),
    product_repo = Depends(product_repo_dep),
    category_repo = Depends(category_repo_dep),
    redis = Depends(redis_dep),
):
    oid = parse_object_id(product_id, "id", "product ID")
    product = await update_product_svc(product_repo, category_repo, redis, oid, payload)
    return {"message": "Product updated successfully", "product": product.model_dump(by_alias=True, mode="json")}


@router.delete("/products/{product_id}", response_model=MessageOut)
async def delete_product(
    product_id: str,
    admin: Principal = Depends(require_admin),
    product_repo = Depends(product_repo_dep),
    category_repo = Depends(category_repo_dep),
    redis = Depends(redis_dep),
):
    oid = parse_object_id(product_id, "id", "product ID")
    await delete_product_svc(product_repo, category_repo, redis, oid)
    return {"message": "Product deleted successfully"}
