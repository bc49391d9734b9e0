"""Gamification database models: per-user stats, XP ledger, achievements, trend baselines."""

import uuid
from enum import Enum

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.sql import func

from learnhub.db.base import Base


class XPEventType(str, Enum):
    """Source of an XP ledger entry."""

    MODULE = "module"
    COURSE = "course"
    ASSESSMENT = "assessment"
    LOGIN = "login"
    STREAK = "streak"
    PERFECT_SCORE = "perfect-score"
    MENTOR_BONUS = "mentor-bonus"
    RESET = "reset"


class UserStats(Base):
    """Progress counters and XP total for one user within one tenant."""

    __tablename__ = "user_stats"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False)

    # ExperienceTotal; only ever increases except through reset_xp
    total_xp = Column(BigInteger, nullable=False, default=0)
    # Cached from calculate_level(total_xp) for listing and sorting
    level = Column(Integer, nullable=False, default=1)
    badges = Column(JSON, nullable=False, default=list)

    total_courses_completed = Column(Integer, nullable=False, default=0)
    total_modules_completed = Column(Integer, nullable=False, default=0)
    total_assessments_taken = Column(Integer, nullable=False, default=0)
    total_assessments_passed = Column(Integer, nullable=False, default=0)
    average_score = Column(Float, nullable=False, default=0.0)

    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)
    last_login_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=func.now(),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("tenant_id", "user_id", name="uq_user_stats_tenant_user"),)

    def counters(self) -> dict[str, float]:
        """Counters consumed by achievement rules and summaries."""
        return {
            "total_courses_completed": self.total_courses_completed or 0,
            "total_modules_completed": self.total_modules_completed or 0,
            "total_assessments_passed": self.total_assessments_passed or 0,
            "average_score": self.average_score or 0.0,
            "current_streak": self.current_streak or 0,
            "longest_streak": self.longest_streak or 0,
        }


class XPEvent(Base):
    """Append-only XP ledger entry."""

    __tablename__ = "xp_events"

    # Ledger order follows id
    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False)
    type = Column(String(32), nullable=False)
    amount = Column(BigInteger, nullable=False)
    label = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (Index("ix_xp_events_tenant_user_created", "tenant_id", "user_id", "created_at"),)


class UserAchievement(Base):
    """An achievement unlocked by a user. Unlocking is idempotent."""

    __tablename__ = "user_achievements"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False)
    achievement_id = Column(String(64), nullable=False)
    unlocked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", "achievement_id", name="uq_user_achievement"),
        Index("ix_user_achievements_tenant_user", "tenant_id", "user_id"),
    )


class DashboardSnapshotRecord(Base):
    """Server-hosted trend baseline: the last dashboard metrics a user saw."""

    __tablename__ = "dashboard_snapshots"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(String(64), nullable=False)
    user_id = Column(String(64), nullable=False)
    # Serialized flat {metric_name: number} mapping
    payload = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=func.now(),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (UniqueConstraint("tenant_id", "user_id", name="uq_dashboard_snapshot_owner"),)
