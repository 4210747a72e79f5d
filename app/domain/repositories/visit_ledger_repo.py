# app/domain/repositories/visit_ledger_repo.py
from __future__ import annotations
from typing import Any, MutableMapping
from redis.asyncio import Redis

"""
Session visit ledger: product_id -> number of detail views in ONE browser session.
Only used for dynamic pricing; never shared across sessions and never
persisted past the session lifetime.

Two backends:
    - RedisVisitLedger: one hash per session, HINCRBY, expires with the session.
    - SessionVisitLedger: the signed cookie session itself (no Redis configured).
"""

SESSION_LEDGER_KEY = "product_visits"

# Cookie sessions are capped by browsers at ~4KB; keep the most recent views only
MAX_COOKIE_LEDGER_ENTRIES = 64


class RedisVisitLedger:
    def __init__(self, redis: Redis, session_id: str, ttl: int, prefix: str = "visits"):
        self.redis = redis
        self.key = f"{prefix}:{session_id}"
        self.ttl = ttl

    async def increment(self, product_id: str) -> int:
        """Count the current view and return the new per-session total."""
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.hincrby(self.key, product_id, 1)
            pipe.expire(self.key, self.ttl)
            count, _ = await pipe.execute()
        return int(count)


class SessionVisitLedger:
    def __init__(self, session: MutableMapping[str, Any]):
        self.session = session

    async def increment(self, product_id: str) -> int:
        # Created lazily on the first product view of the session
        visits = dict(self.session.get(SESSION_LEDGER_KEY) or {})
        count = int(visits.pop(product_id, 0)) + 1
        visits[product_id] = count  # re-insert: most recent last
        while len(visits) > MAX_COOKIE_LEDGER_ENTRIES:
            visits.pop(next(iter(visits)))
        self.session[SESSION_LEDGER_KEY] = visits
        return count
