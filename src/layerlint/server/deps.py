"""
Shared dependencies for routes.
"""

import os
from functools import lru_cache

import redis

from layerlint.core.config import EngineConfig
from layerlint.core.engine import Engine
from layerlint.server.store import RunStore


def get_redis(db: int = 0):
    host = os.environ.get("LAYERLINT_REDIS_HOST", "localhost")
    port = int(os.environ.get("LAYERLINT_REDIS_PORT", "6379"))
    return redis.Redis(host=host, port=port, db=db)


def get_run_store(db: int = 0) -> RunStore:
    return RunStore(get_redis(db))


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """One engine per process, so the result cache is shared across requests."""
    return Engine(EngineConfig.load())
