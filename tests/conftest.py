"""Pytest configuration: test settings, in-memory repositories, API client."""

import os
from datetime import datetime, timedelta, timezone

# Settings are read at import time by app.main / app.db.*
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ.setdefault("MONGO_DB", "catalog_test")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")

import jwt
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.main import app
from app.api.deps import (
    category_repo_dep,
    product_repo_dep,
    product_search_repo_dep,
    redis_dep,
    user_repo_dep,
)
from app.core.security import hash_password


# ---------------------------------------------------------------------------
# In-memory repositories (same async interface as the Mongo-backed ones)
# ---------------------------------------------------------------------------

class FakeCategoryRepo:
    def __init__(self):
        self.docs: dict = {}

    def add(self, name, **extra):
        oid = ObjectId()
        self.docs[oid] = {
            "_id": oid, "name": name, "name_lower": name.lower(), "slug": name.lower(),
            "description": None, "product_count": 0, "is_active": True, **extra,
        }
        return oid

    async def list_active(self):
        return sorted((d for d in self.docs.values() if d["is_active"]), key=lambda d: d["name"])

    async def get(self, category_id):
        return self.docs.get(category_id)

    async def find_by_name(self, name, exclude_id=None):
        for d in self.docs.values():
            if d["name_lower"] == name.strip().lower() and d["_id"] != exclude_id:
                return d
        return None

    async def insert(self, name, description, created_by):
        oid = self.add(name, description=description, created_by=created_by)
        return dict(self.docs[oid])

    async def update(self, category_id, changes):
        doc = self.docs.get(category_id)
        if not doc:
            return None
        doc.update(changes)
        if "name" in changes:
            doc["name_lower"] = changes["name"].lower()
        return dict(doc)

    async def delete(self, category_id):
        return self.docs.pop(category_id, None) is not None

    async def increment_product_count(self, category_id, delta):
        if category_id in self.docs:
            self.docs[category_id]["product_count"] += delta

    async def name_suggestions(self, text, limit):
        return [d for d in self.docs.values() if text.lower() in d["name_lower"]][:limit]


class FakeProductRepo:
    def __init__(self, categories: FakeCategoryRepo):
        self.docs: dict = {}
        self.categories = categories

    def add(self, name="Wireless Headphones", base_price=89.99, **extra):
        oid = ObjectId()
        self.docs[oid] = {
            "_id": oid,
            "name": name,
            "description": "A product used in tests",
            "base_price": base_price,
            "current_price": base_price,
            "stock": 10,
            "category_id": None,
            "brand": "SoundMax",
            "rating": 4.5,
            "review_count": 3,
            "is_active": True,
            "is_featured": False,
            "tags": ["audio"],
            "visit_count": 0,
            "created_at": datetime.now(timezone.utc),
            **extra,
        }
        return oid

    def _with_category(self, doc):
        out = dict(doc)
        cat = self.categories.docs.get(doc.get("category_id"))
        out["category"] = dict(cat) if cat else None
        return out

    async def get(self, product_id):
        doc = self.docs.get(product_id)
        return dict(doc) if doc else None

    async def get_with_category(self, product_id, *, active_only=False):
        doc = self.docs.get(product_id)
        if not doc or (active_only and not doc["is_active"]):
            return None
        return self._with_category(doc)

    async def increment_visit_count(self, product_id):
        self.docs[product_id]["visit_count"] += 1

    async def featured(self, limit):
        docs = [d for d in self.docs.values() if d["is_active"] and d["is_featured"]]
        return [self._with_category(d) for d in docs[:limit]]

    async def count_by_category(self, category_id):
        return sum(1 for d in self.docs.values() if d.get("category_id") == category_id)

    async def insert(self, doc):
        oid = ObjectId()
        self.docs[oid] = {**doc, "_id": oid, "created_at": datetime.now(timezone.utc)}
        return oid

    async def update(self, product_id, changes):
        doc = self.docs.get(product_id)
        if not doc:
            return None
        doc.update(changes)
        return dict(doc)

    async def delete(self, product_id):
        return self.docs.pop(product_id, None) is not None


class FakeSearchRepo:
    """Returns canned documents and records what it was asked to run."""

    def __init__(self):
        self.docs: list = []
        self.total = None
        self.price = None
        self.brands: list = []
        self.queries: list = []
        self.counted: list = []
        self.facet_predicates: list = []

    async def find_page(self, query):
        self.queries.append(query)
        return self.docs[query.skip: query.skip + query.limit]

    async def find(self, predicate, sort, skip=0, limit=10):
        self.queries.append({"predicate": predicate, "sort": sort, "skip": skip, "limit": limit})
        return self.docs[skip: skip + limit]

    async def count(self, predicate):
        self.counted.append(predicate)
        return len(self.docs) if self.total is None else self.total

    async def price_range(self, predicate):
        self.facet_predicates.append(predicate)
        return self.price

    async def distinct_brands(self, predicate):
        self.facet_predicates.append(predicate)
        return list(self.brands)

    async def name_suggestions(self, text, limit):
        return [d for d in self.docs if text.lower() in d["name"].lower()][:limit]

    async def brand_suggestions(self, text):
        return [b for b in self.brands if isinstance(b, str) and text.lower() in b.lower()]


class FakeUserRepo:
    def __init__(self):
        self.docs: dict = {}

    def add(self, name="Jane Doe", email="jane@example.com", role="user", password="secret123", **extra):
        oid = ObjectId()
        self.docs[oid] = {
            "_id": oid, "name": name, "email": email, "role": role, "is_active": True,
            "password": hash_password(password), "created_at": datetime.now(timezone.utc), **extra,
        }
        return oid

    @staticmethod
    def _public(doc):
        return {k: v for k, v in doc.items() if k != "password"}

    async def get(self, user_id, *, with_password=False):
        doc = self.docs.get(user_id)
        if not doc:
            return None
        return dict(doc) if with_password else self._public(doc)

    async def list_active(self, skip, limit):
        active = [self._public(d) for d in self.docs.values() if d["is_active"]]
        return active[skip: skip + limit]

    async def count_active(self):
        return sum(1 for d in self.docs.values() if d["is_active"])

    async def find_by_email(self, email, exclude_id=None):
        for d in self.docs.values():
            if d["email"] == email and d["_id"] != exclude_id:
                return self._public(d)
        return None

    async def update(self, user_id, changes):
        doc = self.docs.get(user_id)
        if not doc:
            return None
        doc.update(changes)
        return self._public(doc)

    async def deactivate(self, user_id):
        await self.update(user_id, {"is_active": False})

    async def set_password(self, user_id, password_hash):
        await self.update(user_id, {"password": password_hash})


class FakeCacheRedis:
    """Dict-backed Redis for the get/set/delete calls of the JSON cache."""

    def __init__(self):
        self.store: dict = {}
        self.expiry: dict = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.expiry[key] = ex

    async def delete(self, key):
        return int(self.store.pop(key, None) is not None)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def categories():
    return FakeCategoryRepo()


@pytest.fixture
def products(categories):
    return FakeProductRepo(categories)


@pytest.fixture
def search_repo():
    return FakeSearchRepo()


@pytest.fixture
def users():
    return FakeUserRepo()


@pytest.fixture
def cache_redis():
    return FakeCacheRedis()


@pytest.fixture
def mongo_db():
    """In-memory Motor database for exercising the real repositories."""
    return AsyncMongoMockClient()["catalog_test"]


@pytest.fixture
def client(products, search_repo, categories, users):
    """API client without Redis: the visit ledger lives in the session cookie."""
    app.dependency_overrides[product_repo_dep] = lambda: products
    app.dependency_overrides[product_search_repo_dep] = lambda: search_repo
    app.dependency_overrides[category_repo_dep] = lambda: categories
    app.dependency_overrides[user_repo_dep] = lambda: users
    app.dependency_overrides[redis_dep] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_client(client):
    """Extra independent clients (separate cookie jars = separate sessions)."""
    return lambda: TestClient(app)


def make_token(user_id, email="someone@example.com", expires_in=3600):
    claims = {
        "userId": str(user_id),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, os.environ["JWT_SECRET"], algorithm="HS256")


def auth_header(user_id, **kw):
    return {"Authorization": f"Bearer {make_token(user_id, **kw)}"}


@pytest.fixture
def admin_headers(users):
    admin_id = users.add(name="Admin", email="admin@store.com", role="admin")
    return auth_header(admin_id, email="admin@store.com")
