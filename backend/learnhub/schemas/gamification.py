"""Schemas for XP, levels, achievements and streaks."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from learnhub.models.gamification import XPEventType

# ============================================================================
# Level Curve
# ============================================================================


class LevelStateResponse(BaseModel):
    """Position of an XP total on the level curve."""

    total_xp: int
    level: int
    current_level_xp: int
    next_level_xp: int
    progress_percent: float
    rank: str


# ============================================================================
# User Stats
# ============================================================================


class UserStatsResponse(BaseModel):
    """Stored progress of one user plus the derived level state."""

    tenant_id: str
    user_id: str
    total_xp: int
    level: int
    badges: list[str]
    total_courses_completed: int
    total_modules_completed: int
    total_assessments_taken: int
    total_assessments_passed: int
    average_score: float
    current_streak: int
    longest_streak: int
    last_activity_date: date | None = None
    level_state: LevelStateResponse


class XPAwardRequest(BaseModel):
    """Schema for awarding XP directly."""

    amount: int = Field(..., description="Between 1 and MAX_XP_AWARD")
    type: XPEventType
    label: str = Field(default="", max_length=255)
    mentor_id: str | None = Field(None, min_length=1, max_length=64)


class CourseCompletionRequest(BaseModel):
    course_title: str | None = Field(None, max_length=200)


class ModuleCompletionRequest(BaseModel):
    module_title: str | None = Field(None, max_length=200)


class AssessmentResultRequest(BaseModel):
    """Schema for recording an assessment result."""

    score: float = Field(..., ge=0, le=100)
    first_attempt: bool = Field(default=False)


class XPResetRequest(BaseModel):
    reason: str | None = Field(None, max_length=255)


class XPAwardResponse(BaseModel):
    """Result of an XP-earning operation."""

    stats: UserStatsResponse
    xp_awarded: int
    level_up: bool
    new_level: int | None = None
    new_badges: list[str]
    new_achievements: list[str]
    mentor_bonus: int


class XPEventResponse(BaseModel):
    """XP ledger entry."""

    id: int
    type: str
    amount: int
    label: str
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# Achievement Summary
# ============================================================================


class BadgeResponse(BaseModel):
    id: str
    name: str | None = None
    description: str | None = None


class AchievementResponse(BaseModel):
    id: str
    name: str
    description: str
    category: str


class NextAchievementResponse(BaseModel):
    """Closest locked achievement in a category."""

    id: str
    name: str
    description: str
    current: float
    target: float
    remaining: float


class LevelBandResponse(BaseModel):
    id: str
    name: str
    min_level: int
    max_level: int


class AchievementSummaryResponse(BaseModel):
    """Learner-facing achievement and streak summary."""

    total_xp: int
    level: int
    rank: str
    level_band: LevelBandResponse | None = None
    progress_percent: float
    counters: dict[str, Any]
    badges: list[BadgeResponse]
    achievements: list[AchievementResponse]
    next_achievements: list[NextAchievementResponse]
