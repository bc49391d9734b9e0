"""Gamification service: XP awards, progress counters, streaks and trends."""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from learnhub.core.app_exceptions import ErrorCode, bad_request
from learnhub.core.config import settings
from learnhub.core.logging import get_logger
from learnhub.gamification.achievements import build_summary, evaluate_achievements
from learnhub.gamification.constants import (
    ASSESSMENT_PASS_SCORE,
    ASSESSMENT_PERFECT_SCORE,
    MAX_XP_AWARD,
    STREAK_BONUS_INTERVAL,
    XPReward,
)
from learnhub.gamification.leveling import LevelState, calculate_level, new_level_badges
from learnhub.gamification.streaks import advance_streak
from learnhub.gamification.stores import get_snapshot_store, snapshot_lock
from learnhub.gamification.trends import TrendDelta, compute_trends
from learnhub.models.gamification import UserAchievement, UserStats, XPEvent, XPEventType

logger = get_logger(__name__)


@dataclass
class XPAwardResult:
    """Outcome of one XP-earning operation."""

    stats: UserStats
    level_state: LevelState
    level_up: bool = False
    new_level: int | None = None
    xp_awarded: int = 0
    new_badges: list[str] = field(default_factory=list)
    new_achievements: list[str] = field(default_factory=list)
    mentor_bonus: int = 0


def _today() -> date:
    return datetime.now(timezone.utc).date()


def stats_query(db: Session, tenant_id: str, user_id: str) -> Query:
    """Stats row of one user, locked for the rest of the transaction."""
    return (
        db.query(UserStats)
        .filter(UserStats.tenant_id == tenant_id, UserStats.user_id == user_id)
        .with_for_update()
    )


def get_or_create_stats(db: Session, tenant_id: str, user_id: str) -> UserStats:
    """
    Load the stats row for a user, creating an empty one on first use.

    The row stays locked until the caller commits so concurrent awards
    serialize their read-modify-write of the totals.
    """
    stats = stats_query(db, tenant_id, user_id).first()
    if stats is None:
        stats = UserStats(
            tenant_id=tenant_id,
            user_id=user_id,
            total_xp=0,
            level=1,
            badges=[],
            total_courses_completed=0,
            total_modules_completed=0,
            total_assessments_taken=0,
            total_assessments_passed=0,
            average_score=0.0,
            current_streak=0,
            longest_streak=0,
        )
        db.add(stats)
        db.flush()
    return stats


def _touch_streak(stats: UserStats, today: date) -> None:
    stats.current_streak, stats.longest_streak = advance_streak(
        stats.current_streak or 0,
        stats.longest_streak or 0,
        stats.last_activity_date,
        today,
    )
    if stats.last_activity_date is None or today > stats.last_activity_date:
        stats.last_activity_date = today


def _apply_awards(
    db: Session,
    stats: UserStats,
    awards: list[tuple[int, XPEventType, str]],
    today: date,
) -> XPAwardResult:
    """Append ledger events, recompute level and hand out milestone badges."""
    previous_level = calculate_level(stats.total_xp or 0).level
    total = 0

    for amount, event_type, label in awards:
        db.add(
            XPEvent(
                tenant_id=stats.tenant_id,
                user_id=stats.user_id,
                type=event_type.value,
                amount=amount,
                label=label,
            )
        )
        total += amount

    stats.total_xp = (stats.total_xp or 0) + total
    state = calculate_level(stats.total_xp)
    stats.level = state.level
    if awards:
        _touch_streak(stats, today)

    result = XPAwardResult(stats=stats, level_state=state, xp_awarded=total)
    if state.level > previous_level:
        result.level_up = True
        result.new_level = state.level
        result.new_badges = new_level_badges(state.level, stats.badges)
        if result.new_badges:
            # Reassign so the JSON column is marked dirty
            stats.badges = list(stats.badges or []) + result.new_badges
        logger.info(
            "Level up",
            extra={
                "tenant_id": stats.tenant_id,
                "user_id": stats.user_id,
                "level": state.level,
                "new_badges": result.new_badges,
            },
        )
    return result


def _unlock_achievements(db: Session, stats: UserStats) -> list[str]:
    unlocked = [
        row.achievement_id
        for row in db.query(UserAchievement.achievement_id).filter(
            UserAchievement.tenant_id == stats.tenant_id,
            UserAchievement.user_id == stats.user_id,
        )
    ]
    new_ids = evaluate_achievements(stats.counters(), unlocked)
    for achievement_id in new_ids:
        db.add(
            UserAchievement(
                tenant_id=stats.tenant_id,
                user_id=stats.user_id,
                achievement_id=achievement_id,
            )
        )
    return new_ids


def _finish(db: Session, result: XPAwardResult) -> XPAwardResult:
    result.new_achievements = _unlock_achievements(db, result.stats)
    db.commit()
    db.refresh(result.stats)
    return result


def award_xp(
    db: Session,
    tenant_id: str,
    user_id: str,
    amount: int,
    event_type: XPEventType,
    label: str = "",
    mentor_id: str | None = None,
    today: date | None = None,
) -> XPAwardResult:
    """
    Award XP to a user.

    When `mentor_id` is given the mentor receives MENTOR_BONUS_RATE of the
    award (floored) as a mentor-bonus event. The bonus itself never earns a
    further bonus.

    Raises:
        AppError: 400 INVALID_XP_AMOUNT for an amount outside 1..MAX_XP_AWARD,
            400 INVALID_XP_TYPE for the reserved reset type
    """
    if not 0 < amount <= MAX_XP_AWARD:
        raise bad_request(
            ErrorCode.INVALID_XP_AMOUNT,
            f"XP amount must be between 1 and {MAX_XP_AWARD}",
            amount=amount,
        )
    if event_type == XPEventType.RESET:
        raise bad_request(
            ErrorCode.INVALID_XP_TYPE, "Reset events are recorded through the XP reset operation"
        )

    today = today or _today()
    stats = get_or_create_stats(db, tenant_id, user_id)
    result = _apply_awards(db, stats, [(amount, event_type, label)], today)

    if mentor_id and mentor_id != user_id:
        bonus = math.floor(amount * settings.MENTOR_BONUS_RATE)
        if bonus > 0:
            mentor_stats = get_or_create_stats(db, tenant_id, mentor_id)
            _apply_awards(
                db,
                mentor_stats,
                [(bonus, XPEventType.MENTOR_BONUS, f"Mentor bonus from {user_id}")],
                today,
            )
            _unlock_achievements(db, mentor_stats)
            result.mentor_bonus = bonus

    return _finish(db, result)


def record_course_completion(
    db: Session,
    tenant_id: str,
    user_id: str,
    course_title: str | None = None,
    today: date | None = None,
) -> XPAwardResult:
    stats = get_or_create_stats(db, tenant_id, user_id)
    stats.total_courses_completed = (stats.total_courses_completed or 0) + 1
    label = f"Completed course: {course_title}" if course_title else "Completed course"
    awards = [(XPReward.COURSE_COMPLETE.value, XPEventType.COURSE, label)]
    return _finish(db, _apply_awards(db, stats, awards, today or _today()))


def record_module_completion(
    db: Session,
    tenant_id: str,
    user_id: str,
    module_title: str | None = None,
    today: date | None = None,
) -> XPAwardResult:
    stats = get_or_create_stats(db, tenant_id, user_id)
    stats.total_modules_completed = (stats.total_modules_completed or 0) + 1
    label = f"Completed module: {module_title}" if module_title else "Completed module"
    awards = [(XPReward.MODULE_COMPLETE.value, XPEventType.MODULE, label)]
    return _finish(db, _apply_awards(db, stats, awards, today or _today()))


def record_assessment(
    db: Session,
    tenant_id: str,
    user_id: str,
    score: float,
    first_attempt: bool = False,
    today: date | None = None,
) -> XPAwardResult:
    """
    Record an assessment result.

    Passing (score >= 70) earns ASSESSMENT_PASS, a perfect score adds
    ASSESSMENT_PERFECT and passing on the first attempt adds
    FIRST_TRY_BONUS. The average score is the running mean over every
    recorded assessment, passed or not.
    """
    if not 0 <= score <= 100:
        raise bad_request(ErrorCode.INVALID_SCORE, "Score must be between 0 and 100", score=score)

    stats = get_or_create_stats(db, tenant_id, user_id)
    taken = (stats.total_assessments_taken or 0) + 1
    stats.average_score = ((stats.average_score or 0.0) * (taken - 1) + score) / taken
    stats.total_assessments_taken = taken

    awards: list[tuple[int, XPEventType, str]] = []
    if score >= ASSESSMENT_PASS_SCORE:
        stats.total_assessments_passed = (stats.total_assessments_passed or 0) + 1
        awards.append((XPReward.ASSESSMENT_PASS.value, XPEventType.ASSESSMENT, "Passed assessment"))
        if score >= ASSESSMENT_PERFECT_SCORE:
            awards.append(
                (XPReward.ASSESSMENT_PERFECT.value, XPEventType.PERFECT_SCORE, "Perfect score")
            )
        if first_attempt:
            awards.append(
                (XPReward.FIRST_TRY_BONUS.value, XPEventType.ASSESSMENT, "Passed on first attempt")
            )

    return _finish(db, _apply_awards(db, stats, awards, today or _today()))


def record_daily_login(
    db: Session, tenant_id: str, user_id: str, today: date | None = None
) -> XPAwardResult:
    """
    Grant the daily login reward once per day.

    Every STREAK_BONUS_INTERVAL-th consecutive day also earns STREAK_BONUS.
    A repeated login on the same day awards nothing.
    """
    today = today or _today()
    stats = get_or_create_stats(db, tenant_id, user_id)

    if stats.last_login_date == today:
        db.commit()
        return XPAwardResult(stats=stats, level_state=calculate_level(stats.total_xp or 0))

    stats.last_login_date = today
    # Streak as it will stand once _apply_awards touches it
    streak, _ = advance_streak(
        stats.current_streak or 0, stats.longest_streak or 0, stats.last_activity_date, today
    )

    awards = [(XPReward.DAILY_LOGIN.value, XPEventType.LOGIN, "Daily login")]
    if streak % STREAK_BONUS_INTERVAL == 0:
        awards.append((XPReward.STREAK_BONUS.value, XPEventType.STREAK, f"{streak}-day streak bonus"))
    return _finish(db, _apply_awards(db, stats, awards, today))


def reset_xp(db: Session, tenant_id: str, user_id: str, reason: str | None = None) -> UserStats:
    """
    Administrative reset of a user's XP to zero.

    Badges, achievements and counters are kept. The ledger gets a reset
    event carrying the negative delta so it still sums to the total.
    """
    stats = get_or_create_stats(db, tenant_id, user_id)
    previous_total = stats.total_xp or 0

    if previous_total:
        db.add(
            XPEvent(
                tenant_id=tenant_id,
                user_id=user_id,
                type=XPEventType.RESET.value,
                amount=-previous_total,
                label=reason or "XP reset",
            )
        )
    stats.total_xp = 0
    stats.level = 1
    db.commit()
    db.refresh(stats)

    logger.warning(
        "XP reset",
        extra={
            "tenant_id": tenant_id,
            "user_id": user_id,
            "previous_total_xp": previous_total,
            "reason": reason,
        },
    )
    return stats


def list_xp_events(db: Session, tenant_id: str, user_id: str, limit: int = 50) -> list[XPEvent]:
    """Most recent ledger entries first."""
    return (
        db.query(XPEvent)
        .filter(XPEvent.tenant_id == tenant_id, XPEvent.user_id == user_id)
        .order_by(XPEvent.id.desc())
        .limit(limit)
        .all()
    )


def get_summary(db: Session, tenant_id: str, user_id: str) -> dict[str, Any]:
    stats = get_or_create_stats(db, tenant_id, user_id)
    unlocked = [
        row.achievement_id
        for row in db.query(UserAchievement.achievement_id).filter(
            UserAchievement.tenant_id == tenant_id,
            UserAchievement.user_id == user_id,
        )
    ]
    db.commit()

    summary = build_summary(
        stats.counters(), unlocked, calculate_level(stats.total_xp or 0), stats.badges or []
    )
    summary["total_xp"] = stats.total_xp or 0
    return summary


def compute_dashboard_trends(
    db: Session, tenant_id: str, user_id: str, current: Mapping[str, float]
) -> dict[str, TrendDelta | None]:
    """
    Trend deltas against the user's server-hosted baseline.

    The baseline advances to `current` on every call. The read and the
    overwrite happen under the owner's snapshot lock; when another worker
    holds it every trend is None and the baseline is left alone.
    """
    with snapshot_lock(tenant_id, user_id) as acquired:
        if not acquired:
            return {name: None for name in current}
        store = get_snapshot_store(db, tenant_id, user_id)
        trends = compute_trends(current, store)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(
                "Failed to persist trend baseline",
                extra={"tenant_id": tenant_id, "user_id": user_id, "error": str(e)},
            )
    return trends
