"""
Gamification module.

Pure calculators for the XP level curve, dashboard trend deltas, activity
streaks and achievement rules, plus the database-backed service that
applies them to stored learner progress.
"""

from learnhub.gamification.achievements import (
    ACHIEVEMENT_RULES,
    AchievementRule,
    build_summary,
    evaluate_achievements,
)
from learnhub.gamification.leveling import (
    LevelState,
    badges_for_level,
    calculate_level,
    cumulative_xp_for_level,
    get_achievement_for_level,
    get_badge_info,
    get_rank_name,
    is_milestone_level,
    new_level_badges,
    requirement_for_level,
)
from learnhub.gamification.streaks import advance_streak, compute_streak
from learnhub.gamification.trends import (
    InMemorySnapshotStore,
    JsonFileSnapshotStore,
    SnapshotStore,
    TrendDelta,
    calculate_trend,
    compute_trends,
)

__all__ = [
    "ACHIEVEMENT_RULES",
    "AchievementRule",
    "build_summary",
    "evaluate_achievements",
    "LevelState",
    "badges_for_level",
    "calculate_level",
    "cumulative_xp_for_level",
    "get_achievement_for_level",
    "get_badge_info",
    "get_rank_name",
    "is_milestone_level",
    "new_level_badges",
    "requirement_for_level",
    "advance_streak",
    "compute_streak",
    "InMemorySnapshotStore",
    "JsonFileSnapshotStore",
    "SnapshotStore",
    "TrendDelta",
    "calculate_trend",
    "compute_trends",
]
