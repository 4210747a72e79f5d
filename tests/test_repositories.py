"""Mongo-backed repositories and the facet cache, on an in-memory Motor database."""

import anyio
import pytest
from bson import ObjectId

from app.domain.models.product import PriceRange, SearchFacets
from app.domain.repositories.category_repo import CategoryRepo
from app.domain.repositories.product_repo import ProductRepo
from app.domain.repositories.product_search_repo import ProductSearchRepo
from app.domain.repositories.visit_ledger_repo import SessionVisitLedger
from app.domain.services.catalog_svc import FACETS_CACHE_KEY, get_facets_svc
from app.domain.services.product_detail_svc import get_product_detail_svc
from app.domain.services.query_builder import CatalogFilters, build_query, facet_predicate


async def _seed(db):
    cat = (await db["categories"].insert_one({"name": "Accessories", "is_active": True})).inserted_id

    def product(name, price, **extra):
        return {
            "name": name, "description": f"{name} used in tests",
            "base_price": price, "current_price": price, "stock": 5,
            "category_id": cat, "brand": None, "tags": [], "rating": 4.0,
            "is_active": True, "is_featured": False, "visit_count": 0, **extra,
        }

    res = await db["products"].insert_many([
        product("Alpha Phone", 30.0, brand="Acme", stock=0, tags=["phone"]),
        product("Beta Case", 5.0, brand="Zed", tags=["phone", "case"]),
        product("Gamma Lamp", 50.0, brand=""),
        product("Old Phone", 999.0, brand="Retro", is_active=False),
    ])
    return cat, dict(zip(["alpha", "beta", "gamma", "old"], res.inserted_ids))


@pytest.mark.anyio
async def test_search_page_filters_sorts_and_joins_category(mongo_db):
    cat, _ = await _seed(mongo_db)
    repo = ProductSearchRepo(mongo_db)

    # "phone" only appears in Beta's tags; Alpha is out of stock, Old is inactive
    query = build_query(CatalogFilters(search="phone", in_stock=True, sort="price-low"))
    docs = await repo.find_page(query)
    assert [d["name"] for d in docs] == ["Beta Case"]
    assert docs[0]["category"]["_id"] == cat
    assert await repo.count(query.predicate) == 1


@pytest.mark.anyio
async def test_search_page_window(mongo_db):
    await _seed(mongo_db)
    repo = ProductSearchRepo(mongo_db)

    by_price = build_query(CatalogFilters(sort="price-high", page=2, limit=1))
    assert [d["name"] for d in await repo.find_page(by_price)] == ["Alpha Phone"]
    assert await repo.count(by_price.predicate) == 3


@pytest.mark.anyio
async def test_facet_aggregates_cover_active_products_only(mongo_db):
    await _seed(mongo_db)
    repo = ProductSearchRepo(mongo_db)

    assert await repo.price_range(facet_predicate()) == {"min_price": 5.0, "max_price": 50.0}
    assert sorted(await repo.distinct_brands(facet_predicate())) == ["Acme", "Zed"]


@pytest.mark.anyio
async def test_facets_are_cached_and_served_from_cache(mongo_db, cache_redis):
    await _seed(mongo_db)
    repo = ProductSearchRepo(mongo_db)

    first = await get_facets_svc(repo, cache_redis, cache_ttl=60)
    assert first == SearchFacets(price_range=PriceRange(min_price=5.0, max_price=50.0), brands=["Acme", "Zed"])
    assert cache_redis.expiry[FACETS_CACHE_KEY] == 60

    # a later catalog change is not visible until the key is dropped
    await mongo_db["products"].update_many({}, {"$set": {"is_active": False}})
    assert await get_facets_svc(repo, cache_redis, cache_ttl=60) == first

    await cache_redis.delete(FACETS_CACHE_KEY)
    assert await get_facets_svc(repo, cache_redis, cache_ttl=60) == SearchFacets(price_range=PriceRange(), brands=[])


@pytest.mark.anyio
async def test_get_with_category_hides_inactive_when_asked(mongo_db):
    cat, ids = await _seed(mongo_db)
    repo = ProductRepo(mongo_db)

    assert (await repo.get_with_category(ids["alpha"], active_only=True))["category"]["_id"] == cat
    assert await repo.get_with_category(ids["old"], active_only=True) is None
    assert (await repo.get_with_category(ids["old"]))["name"] == "Old Phone"
    assert await repo.get_with_category(ObjectId()) is None


@pytest.mark.anyio
async def test_product_without_existing_category_gets_null_category(mongo_db):
    repo = ProductRepo(mongo_db)
    pid = await repo.insert({"name": "Orphan", "base_price": 1.0, "current_price": 1.0,
                             "category_id": ObjectId(), "is_active": True})
    doc = await repo.get_with_category(pid)
    assert doc["name"] == "Orphan"
    assert doc.get("category") is None


@pytest.mark.anyio
async def test_concurrent_detail_views_are_all_counted(mongo_db):
    _, ids = await _seed(mongo_db)
    repo = ProductRepo(mongo_db)
    sessions = [{} for _ in range(20)]

    async def view(session):
        await get_product_detail_svc(repo, SessionVisitLedger(session), ids["beta"])

    async with anyio.create_task_group() as tg:
        for s in sessions:
            tg.start_soon(view, s)

    assert (await repo.get(ids["beta"]))["visit_count"] == 20


@pytest.mark.anyio
async def test_detail_view_prices_from_stored_record(mongo_db):
    _, ids = await _seed(mongo_db)
    repo = ProductRepo(mongo_db)
    ledger = SessionVisitLedger({})

    views = [await get_product_detail_svc(repo, ledger, ids["gamma"]) for _ in range(3)]
    assert [v.dynamic_price for v in views] == [50.0, 50.0, 55.0]
    assert [v.visit_count for v in views] == [0, 1, 2]
    assert (await repo.get(ids["gamma"]))["current_price"] == 50.0


@pytest.mark.anyio
async def test_update_and_delete(mongo_db):
    _, ids = await _seed(mongo_db)
    repo = ProductRepo(mongo_db)

    updated = await repo.update(ids["beta"], {"brand": None, "stock": 0})
    assert updated["brand"] is None and updated["stock"] == 0
    assert "updated_at" in updated
    assert await repo.update(ObjectId(), {"stock": 1}) is None

    assert await repo.delete(ids["beta"]) is True
    assert await repo.delete(ids["beta"]) is False


@pytest.mark.anyio
async def test_category_counter_and_name_lookup(mongo_db):
    repo = CategoryRepo(mongo_db)
    cat = await repo.insert("Home & Kitchen", None, None)
    assert cat["slug"] == "home-kitchen"

    await repo.increment_product_count(cat["_id"], 2)
    await repo.increment_product_count(cat["_id"], -1)
    assert (await repo.get(cat["_id"]))["product_count"] == 1

    assert (await repo.find_by_name(" home & KITCHEN "))["_id"] == cat["_id"]
    assert await repo.find_by_name("Home & Kitchen", exclude_id=cat["_id"]) is None
