"""Server-hosted trend baselines and per-owner snapshot locking."""

import json
import threading
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy.orm import Session

from learnhub.core.config import settings
from learnhub.core.logging import get_logger
from learnhub.core.redis_client import get_redis_client
from learnhub.core.redis_lock import redis_lock
from learnhub.gamification.constants import SNAPSHOT_STORAGE_KEY
from learnhub.gamification.trends import Snapshot, SnapshotStore
from learnhub.models.gamification import DashboardSnapshotRecord

logger = get_logger(__name__)

_local_locks: dict[tuple[str, str], threading.Lock] = {}
_local_locks_guard = threading.Lock()


def _local_lock(tenant_id: str, user_id: str) -> threading.Lock:
    with _local_locks_guard:
        lock = _local_locks.get((tenant_id, user_id))
        if lock is None:
            lock = _local_locks[(tenant_id, user_id)] = threading.Lock()
        return lock


def snapshot_key(tenant_id: str, user_id: str) -> str:
    return f"learnhub:{SNAPSHOT_STORAGE_KEY}:{tenant_id}:{user_id}"


@contextmanager
def snapshot_lock(tenant_id: str, user_id: str) -> Generator[bool, None, None]:
    """
    Serialize the read-then-overwrite of one owner's baseline.

    Concurrent requests in this process wait for each other. Across
    processes the Redis lock is used when Redis is available.

    Yields:
        True when the baseline may be updated, False when another worker
        holds the lock
    """
    with _local_lock(tenant_id, user_id):
        lock_key = f"lock:{snapshot_key(tenant_id, user_id)}"
        with redis_lock(lock_key, ttl_seconds=settings.SNAPSHOT_LOCK_TTL) as acquired:
            if not acquired:
                logger.info(
                    "Snapshot lock busy, skipping trends",
                    extra={"tenant_id": tenant_id, "user_id": user_id},
                )
            yield acquired


class SQLSnapshotStore(SnapshotStore):
    """Baseline stored as one dashboard_snapshots row per owner."""

    def __init__(self, db: Session, tenant_id: str, user_id: str):
        self.db = db
        self.tenant_id = tenant_id
        self.user_id = user_id

    def _record(self) -> DashboardSnapshotRecord | None:
        return (
            self.db.query(DashboardSnapshotRecord)
            .filter(
                DashboardSnapshotRecord.tenant_id == self.tenant_id,
                DashboardSnapshotRecord.user_id == self.user_id,
            )
            .first()
        )

    def load(self) -> Any:
        record = self._record()
        return record.payload if record else None

    def save(self, snapshot: Snapshot) -> None:
        payload = json.dumps(snapshot)
        record = self._record()
        if record is None:
            record = DashboardSnapshotRecord(
                tenant_id=self.tenant_id, user_id=self.user_id, payload=payload
            )
            self.db.add(record)
        else:
            record.payload = payload
        # Flush inside the lock; the caller commits
        self.db.flush()


class RedisSnapshotStore(SnapshotStore):
    """Baseline stored as a JSON string under a per-owner Redis key."""

    def __init__(self, client: Any, tenant_id: str, user_id: str):
        self.client = client
        self.key = snapshot_key(tenant_id, user_id)

    def load(self) -> Any:
        return self.client.get(self.key)

    def save(self, snapshot: Snapshot) -> None:
        self.client.set(self.key, json.dumps(snapshot))


def get_snapshot_store(db: Session, tenant_id: str, user_id: str) -> SnapshotStore:
    """Store for the configured TREND_SNAPSHOT_BACKEND."""
    if settings.TREND_SNAPSHOT_BACKEND == "redis":
        client = get_redis_client()
        if client is not None:
            return RedisSnapshotStore(client, tenant_id, user_id)
        logger.warning("Redis snapshot backend unavailable, falling back to SQL")
    return SQLSnapshotStore(db, tenant_id, user_id)
