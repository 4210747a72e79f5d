# app/api/deps.py
import uuid

from bson import ObjectId
from fastapi import Depends, Request

from app.core.config import get_settings
from app.core.errors import ValidationFailed
from app.db.mongo import get_db
from app.db.redis import get_redis
from app.domain.repositories.category_repo import CategoryRepo
from app.domain.repositories.product_repo import ProductRepo
from app.domain.repositories.product_search_repo import ProductSearchRepo
from app.domain.repositories.user_repo import UserRepo
from app.domain.repositories.visit_ledger_repo import RedisVisitLedger, SessionVisitLedger
from app.utils.ids import is_object_id

# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    return db

# Dependency for injecting the Redis client into endpoints/services (may be None)
def redis_dep():
    return get_redis()


# ---------- Repositories ----------
def product_repo_dep(db = Depends(mongo_db)) -> ProductRepo:
    return ProductRepo(db)

def product_search_repo_dep(db = Depends(mongo_db)) -> ProductSearchRepo:
    return ProductSearchRepo(db)

def category_repo_dep(db = Depends(mongo_db)) -> CategoryRepo:
    return CategoryRepo(db)

def user_repo_dep(db = Depends(mongo_db)) -> UserRepo:
    return UserRepo(db)


# ---------- Session visit ledger ----------
def session_id(request: Request) -> str:
    """Session id kept in the signed session cookie, created on first use."""
    sid = request.session.get("sid")
    if not sid:
        sid = uuid.uuid4().hex
        request.session["sid"] = sid
    return sid

def visit_ledger_dep(request: Request, redis = Depends(redis_dep)):
    if redis is None:
        return SessionVisitLedger(request.session)
    settings = get_settings()
    return RedisVisitLedger(
        redis,
        session_id(request),
        ttl=settings.session_max_age,
        prefix=settings.visits_key_prefix,
    )


# ---------- Path ids ----------
def parse_object_id(value: str, field: str = "id", label: str = "ID") -> ObjectId:
    if not is_object_id(value):
        raise ValidationFailed(field, f"Invalid {label} format")
    return ObjectId(value)
