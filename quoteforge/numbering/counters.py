"""Counter stores offering one atomic increment-and-fetch per scope key."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quoteforge.core.config import get_settings
from quoteforge.core.errors import AllocationError
from quoteforge.db.crud.counters import increment_counter

logger = logging.getLogger(__name__)

REDIS_KEY_PREFIX = "quoteforge:seq:"


class SqlCounterStore:
    """Counters in the `sequence_counters` table.

    The increment joins the caller's transaction: if the quote write that
    follows is rolled back, so is the increment.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def increment(self, scope: str, *, year: Optional[int] = None) -> int:
        try:
            return increment_counter(self.db, scope, year)
        except (SQLAlchemyError, LookupError) as exc:
            logger.error("sequence allocation failed for scope %s: %s", scope, exc)
            raise AllocationError("Could not allocate a quote number") from exc


class RedisCounterStore:
    """Counters as Redis integers. A number allocated here is never handed out again,
    even if the quote write later fails."""

    def __init__(self, conn: Redis) -> None:
        self.conn = conn

    def increment(self, scope: str, *, year: Optional[int] = None) -> int:
        try:
            return int(self.conn.incr(REDIS_KEY_PREFIX + scope))
        except RedisError as exc:
            logger.error("sequence allocation failed for scope %s: %s", scope, exc)
            raise AllocationError("Could not allocate a quote number") from exc


@lru_cache(maxsize=None)
def get_redis(url: str) -> Redis:
    # one client (and connection pool) per URL for the life of the process
    return Redis.from_url(url)


def get_counter_store(db: Session) -> SqlCounterStore | RedisCounterStore:
    settings = get_settings()
    if settings.COUNTER_BACKEND == "redis":
        return RedisCounterStore(get_redis(settings.REDIS_URL))
    return SqlCounterStore(db)
