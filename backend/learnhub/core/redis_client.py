"""Shared Redis client for snapshot locks and the Redis snapshot store."""

import time

import redis
from redis.exceptions import RedisError

from learnhub.core.config import settings
from learnhub.core.logging import get_logger

logger = get_logger(__name__)

# Seconds to wait before retrying after a failed connection attempt
RECONNECT_BACKOFF = 30.0

_client: redis.Redis | None = None
_last_failure: float | None = None


def _connect() -> redis.Redis:
    client = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=1,
        socket_timeout=1,
        health_check_interval=30,
    )
    client.ping()
    return client


def get_redis_client() -> redis.Redis | None:
    """
    Return the shared client, or None when Redis is disabled or unreachable.

    A failed connection is retried at most every RECONNECT_BACKOFF seconds so
    callers that fail open do not pay a connect timeout on every request.
    When REDIS_REQUIRED is set a failure raises instead.
    """
    global _client, _last_failure

    if not settings.REDIS_ENABLED:
        return None
    if _client is not None:
        return _client
    if not settings.REDIS_URL:
        if settings.REDIS_REQUIRED:
            raise ValueError("REDIS_URL must be set when REDIS_REQUIRED=true")
        return None
    if _last_failure is not None and time.monotonic() - _last_failure < RECONNECT_BACKOFF:
        return None

    try:
        _client = _connect()
        _last_failure = None
        logger.info("Redis connection established")
    except RedisError as e:
        _last_failure = time.monotonic()
        if settings.REDIS_REQUIRED:
            raise
        logger.warning("Redis unavailable, continuing without it", extra={"error": str(e)})
    return _client


def is_redis_available() -> bool:
    client = get_redis_client()
    if client is None:
        return False
    try:
        return bool(client.ping())
    except RedisError:
        return False


def init_redis() -> None:
    """Connect eagerly at startup so REDIS_REQUIRED misconfiguration fails fast."""
    if settings.REDIS_ENABLED:
        get_redis_client()


def close_redis() -> None:
    global _client, _last_failure
    if _client is not None:
        try:
            _client.close()
        except RedisError as e:
            logger.warning("Error closing Redis connection", extra={"error": str(e)})
    _client = None
    _last_failure = None
