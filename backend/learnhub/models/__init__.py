"""Database models."""

# Import all models here so Alembic and create_all can detect them
from learnhub.models.gamification import (
    DashboardSnapshotRecord,
    UserAchievement,
    UserStats,
    XPEvent,
    XPEventType,
)

__all__ = [
    "UserStats",
    "XPEvent",
    "XPEventType",
    "UserAchievement",
    "DashboardSnapshotRecord",
]
