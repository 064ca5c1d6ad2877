"""Distributed locking helpers backed by Redis."""

from contextlib import contextmanager
from typing import Iterator, Optional
import os

import redis


class RedisLockError(RuntimeError):
    """Raised when a distributed lock cannot be acquired."""


def _redis_client(redis_url: Optional[str] = None) -> redis.Redis:
    url = redis_url or os.getenv("REDIS_URL", "redis://redis:6379/0")
    return redis.Redis.from_url(url, decode_responses=False)


@contextmanager
def redis_lock(
    key: str,
    ttl: int = 60,
    wait_timeout: float = 10,
    redis_url: Optional[str] = None,
) -> Iterator[None]:
    """Acquire a Redis-based lock for the duration of the context."""

    client = _redis_client(redis_url)
    lock = client.lock(name=f"lock:{key}", timeout=ttl, blocking_timeout=wait_timeout)
    acquired = lock.acquire(blocking=True)
    if not acquired:
        raise RedisLockError(f"Could not acquire lock for key '{key}' within {wait_timeout}s")

    try:
        yield
    finally:
        try:
            lock.release()
        except redis.exceptions.LockError:
            # Lock expired before release
            pass
