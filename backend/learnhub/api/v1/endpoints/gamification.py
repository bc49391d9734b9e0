"""Gamification API endpoints: levels, XP, achievements and streaks."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from learnhub.core.dependencies import Caller
from learnhub.db.session import get_db
from learnhub.gamification import service
from learnhub.gamification.leveling import calculate_level, get_rank_name
from learnhub.gamification.trends import diff_snapshots
from learnhub.models.gamification import UserStats
from learnhub.schemas.gamification import (
    AchievementSummaryResponse,
    AssessmentResultRequest,
    CourseCompletionRequest,
    LevelStateResponse,
    ModuleCompletionRequest,
    UserStatsResponse,
    XPAwardRequest,
    XPAwardResponse,
    XPEventResponse,
    XPResetRequest,
)
from learnhub.schemas.trends import TrendDeltaResponse, TrendDiffRequest, TrendsResponse

router = APIRouter()


def _level_response(xp: int) -> LevelStateResponse:
    state = calculate_level(xp)
    return LevelStateResponse(
        total_xp=xp,
        level=state.level,
        current_level_xp=state.current_level_xp,
        next_level_xp=state.next_level_xp,
        progress_percent=state.progress_percent,
        rank=get_rank_name(state.level),
    )


def _stats_response(stats: UserStats) -> UserStatsResponse:
    return UserStatsResponse(
        tenant_id=stats.tenant_id,
        user_id=stats.user_id,
        total_xp=stats.total_xp or 0,
        level=stats.level or 1,
        badges=list(stats.badges or []),
        total_courses_completed=stats.total_courses_completed or 0,
        total_modules_completed=stats.total_modules_completed or 0,
        total_assessments_taken=stats.total_assessments_taken or 0,
        total_assessments_passed=stats.total_assessments_passed or 0,
        average_score=stats.average_score or 0.0,
        current_streak=stats.current_streak or 0,
        longest_streak=stats.longest_streak or 0,
        last_activity_date=stats.last_activity_date,
        level_state=_level_response(stats.total_xp or 0),
    )


def _award_response(result: service.XPAwardResult) -> XPAwardResponse:
    return XPAwardResponse(
        stats=_stats_response(result.stats),
        xp_awarded=result.xp_awarded,
        level_up=result.level_up,
        new_level=result.new_level,
        new_badges=result.new_badges,
        new_achievements=result.new_achievements,
        mentor_bonus=result.mentor_bonus,
    )


# ============================================================================
# Stateless calculators
# ============================================================================


@router.get("/level", response_model=LevelStateResponse)
async def get_level(xp: int = Query(..., description="Cumulative XP; negative values count as 0")):
    """Position of an XP total on the level curve."""
    return _level_response(max(xp, 0))


@router.post("/trends", response_model=TrendsResponse)
async def diff_trends(request: TrendDiffRequest):
    """
    Compare two metric snapshots without touching any stored baseline.

    A missing `previous` yields a null trend for every metric.
    """
    trends = diff_snapshots(request.current, request.previous)
    return TrendsResponse(
        trends={
            name: TrendDeltaResponse(percent_change=t.percent_change, label=t.label) if t else None
            for name, t in trends.items()
        }
    )


# ============================================================================
# Caller progress
# ============================================================================


@router.get("/me", response_model=UserStatsResponse)
def get_my_stats(caller: Caller, db: Session = Depends(get_db)):
    stats = service.get_or_create_stats(db, caller.tenant_id, caller.user_id)
    db.commit()
    return _stats_response(stats)


@router.get("/me/summary", response_model=AchievementSummaryResponse)
def get_my_summary(caller: Caller, db: Session = Depends(get_db)):
    """Level, rank, badges, unlocked achievements and the next goal per category."""
    return service.get_summary(db, caller.tenant_id, caller.user_id)


@router.get("/me/xp-events", response_model=list[XPEventResponse])
def get_my_xp_events(
    caller: Caller,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """XP ledger, most recent first."""
    return service.list_xp_events(db, caller.tenant_id, caller.user_id, limit=limit)


@router.post("/me/xp", response_model=XPAwardResponse)
def award_my_xp(request: XPAwardRequest, caller: Caller, db: Session = Depends(get_db)):
    """
    Award XP to the caller.

    When `mentor_id` is set the mentor receives a bonus share of the award.
    """
    result = service.award_xp(
        db,
        caller.tenant_id,
        caller.user_id,
        amount=request.amount,
        event_type=request.type,
        label=request.label,
        mentor_id=request.mentor_id,
    )
    return _award_response(result)


@router.post("/me/courses/complete", response_model=XPAwardResponse)
def complete_course(
    caller: Caller,
    request: CourseCompletionRequest | None = None,
    db: Session = Depends(get_db),
):
    result = service.record_course_completion(
        db, caller.tenant_id, caller.user_id, course_title=request.course_title if request else None
    )
    return _award_response(result)


@router.post("/me/modules/complete", response_model=XPAwardResponse)
def complete_module(
    caller: Caller,
    request: ModuleCompletionRequest | None = None,
    db: Session = Depends(get_db),
):
    result = service.record_module_completion(
        db, caller.tenant_id, caller.user_id, module_title=request.module_title if request else None
    )
    return _award_response(result)


@router.post("/me/assessments", response_model=XPAwardResponse)
def record_assessment(
    request: AssessmentResultRequest, caller: Caller, db: Session = Depends(get_db)
):
    result = service.record_assessment(
        db,
        caller.tenant_id,
        caller.user_id,
        score=request.score,
        first_attempt=request.first_attempt,
    )
    return _award_response(result)


@router.post("/me/login", response_model=XPAwardResponse)
def record_login(caller: Caller, db: Session = Depends(get_db)):
    """Daily login reward; repeated calls on the same day award nothing."""
    return _award_response(service.record_daily_login(db, caller.tenant_id, caller.user_id))


# ============================================================================
# Administration
# ============================================================================


@router.post("/users/{user_id}/xp/reset", response_model=UserStatsResponse)
def reset_user_xp(
    user_id: str,
    caller: Caller,
    request: XPResetRequest | None = None,
    db: Session = Depends(get_db),
):
    """
    Reset a user's XP to zero within the caller's tenant.

    Badges, achievements and counters are kept.
    """
    reason = request.reason if request and request.reason else f"Reset by {caller.user_id}"
    stats = service.reset_xp(db, caller.tenant_id, user_id, reason=reason)
    return _stats_response(stats)
