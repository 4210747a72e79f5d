# app/api/v1/routers/health.py
import time
import subprocess
from fastapi import APIRouter
from app.core.config import get_settings
from app.db import mongo
from app.db.redis import get_redis  # returns Redis instance or None
from app.domain.services.catalog_svc import FACETS_CACHE_KEY
from app.domain.services.query_builder import active_predicate

router = APIRouter(tags=["health"])
START_TIME = time.time()


def _git_sha(short: bool = True) -> str:
    try:
        cmd = ["git", "rev-parse", "--short" if short else "HEAD"]
        return subprocess.check_output(cmd, stderr=subprocess.DEVNULL).decode().strip()
    except Exception:
        return "unknown"


@router.get("/health")
async def health():
    """
    Tolerant health check:
    - Mongo must answer a ping
    - Redis is optional: 'skipped' when not configured (ledger uses the cookie session)
    """
    settings = get_settings()
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA if settings.GIT_SHA != "unknown" else _git_sha(),
        "uptime_seconds": int(time.time() - START_TIME),
    }

    # --- Mongo ---
    try:
        db = mongo.get_db()
        await db.command("ping")
        checks["mongodb"] = "ok"
        checks["active_products"] = await db["products"].count_documents(active_predicate())
    except Exception as e:
        checks["mongodb"] = f"error: {e}"

    # --- Redis ---
    try:
        r = get_redis()
        if r:
            await r.ping()
            checks["redis"] = "ok"
        else:
            checks["redis"] = "skipped"
    except Exception as e:
        checks["redis"] = f"error: {e}"

    # both fall back when Redis is absent: ledger to the cookie session, facets to a fresh aggregate
    redis_ok = checks["redis"] == "ok"
    checks["visit_ledger"] = "redis" if redis_ok else "session"
    checks["facets_cache"] = {"enabled": redis_ok, "key": FACETS_CACHE_KEY, "ttl_seconds": settings.facets_cache_ttl}

    status = "ok" if all(checks.get(k) in ("ok", "skipped") for k in ("mongodb", "redis")) else "error"

    return {"status": status, "checks": checks, "timestamp": int(time.time())}
