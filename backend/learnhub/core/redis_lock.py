"""Redis-based distributed locking for concurrency control."""

from contextlib import contextmanager
from typing import Generator

from redis.exceptions import RedisError

from learnhub.core.logging import get_logger
from learnhub.core.redis_client import get_redis_client

logger = get_logger(__name__)

# Default lock TTL (5 seconds - enough for a snapshot read-then-overwrite)
DEFAULT_LOCK_TTL = 5


@contextmanager
def redis_lock(lock_key: str, ttl_seconds: int = DEFAULT_LOCK_TTL) -> Generator[bool, None, None]:
    """
    Acquire a Redis lock with automatic release.

    Usage:
        with redis_lock("snapshot:tenant:user") as acquired:
            if acquired:
                # Critical section
                pass
            else:
                # Lock held by another worker
                pass

    Args:
        lock_key: Redis key for the lock
        ttl_seconds: Lock TTL in seconds (auto-releases after this time)

    Yields:
        True if lock acquired, False otherwise
    """
    redis_client = get_redis_client()
    acquired = False

    if not redis_client:
        # Redis unavailable - fail open (allow operation)
        logger.debug(f"Redis unavailable, skipping distributed lock: {lock_key}")
        yield True
        return

    try:
        # SET NX EX: only set if absent, expire after TTL
        acquired = bool(redis_client.set(lock_key, "1", nx=True, ex=ttl_seconds))
    except RedisError as e:
        logger.error(f"Error acquiring lock {lock_key}: {e}")
        # Fail open - allow operation to proceed
        yield True
        return

    if acquired:
        logger.debug(f"Acquired lock: {lock_key}")
    else:
        logger.debug(f"Lock already held: {lock_key}")

    try:
        yield acquired
    finally:
        if acquired:
            try:
                redis_client.delete(lock_key)
                logger.debug(f"Released lock: {lock_key}")
            except RedisError as e:
                logger.error(f"Error releasing lock {lock_key}: {e}")
