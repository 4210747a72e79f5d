"""Product detail: session visit tracking + dynamic price."""

import anyio
import pytest
from bson import ObjectId

from app.core.errors import NotFound
from app.domain.repositories.visit_ledger_repo import SessionVisitLedger
from app.domain.services.product_detail_svc import get_product_detail_svc


def test_first_view_is_not_adjusted(client, products, categories):
    cat = categories.add("Electronics")
    pid = products.add(base_price=89.99, category_id=cat)

    r = client.get(f"/api/products/{pid}")
    assert r.status_code == 200
    body = r.json()
    assert body["_id"] == str(pid)
    assert body["basePrice"] == 89.99
    assert body["dynamicPrice"] == 89.99
    assert body["userVisits"] == 1
    assert body["priceAdjustment"] is False
    assert body["category"]["name"] == "Electronics"


def test_repeated_views_in_one_session_raise_the_price(client, products):
    pid = products.add(base_price=89.99)

    seen = [client.get(f"/api/products/{pid}").json() for _ in range(6)]
    assert [b["userVisits"] for b in seen] == [1, 2, 3, 4, 5, 6]
    assert [b["dynamicPrice"] for b in seen] == [89.99, 89.99, 98.99, 98.99, 98.99, 107.99]
    assert seen[2]["priceAdjustment"] is True
    # catalog price is untouched
    assert products.docs[pid]["current_price"] == 89.99


def test_ledger_is_per_session(client, make_client, products):
    pid = products.add(base_price=50)
    for _ in range(3):
        client.get(f"/api/products/{pid}")

    other = make_client()
    r = other.get(f"/api/products/{pid}")
    assert r.json()["userVisits"] == 1
    assert r.json()["dynamicPrice"] == 50

    # global counter saw every view
    assert products.docs[pid]["visit_count"] == 4


def test_ledger_is_per_product(client, products):
    a = products.add(name="A", base_price=10)
    b = products.add(name="B", base_price=10)
    for _ in range(3):
        client.get(f"/api/products/{a}")
    assert client.get(f"/api/products/{b}").json()["userVisits"] == 1
    assert client.get(f"/api/products/{a}").json()["userVisits"] == 4


def test_missing_or_inactive_product_is_404(client, products):
    inactive = products.add(is_active=False)
    assert client.get(f"/api/products/{ObjectId()}").status_code == 404
    r = client.get(f"/api/products/{inactive}")
    assert r.status_code == 404
    assert r.json() == {"message": "Product not found"}
    assert products.docs[inactive]["visit_count"] == 0


def test_malformed_id_is_400(client):
    r = client.get("/api/products/not-an-id")
    assert r.status_code == 400
    assert r.json()["errors"][0]["field"] == "id"


@pytest.mark.anyio
async def test_concurrent_views_from_distinct_sessions(products):
    pid = products.add(base_price=20)
    sessions = [{} for _ in range(25)]

    async def view(session):
        await get_product_detail_svc(products, SessionVisitLedger(session), pid)

    async with anyio.create_task_group() as tg:
        for s in sessions:
            tg.start_soon(view, s)

    assert products.docs[pid]["visit_count"] == 25
    assert all(s["product_visits"] == {str(pid): 1} for s in sessions)


@pytest.mark.anyio
async def test_not_found_never_touches_ledger(products):
    session = {}
    with pytest.raises(NotFound):
        await get_product_detail_svc(products, SessionVisitLedger(session), ObjectId())
    assert session == {}
