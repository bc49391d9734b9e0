"""
Achievement rules and the progress summary shown to learners.

Rules are evaluated against plain counters (courses completed, streak
length, ...) so they can run over stored stats or ad-hoc values alike.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from learnhub.gamification.leveling import (
    LevelState,
    get_achievement_for_level,
    get_badge_info,
    get_rank_name,
)


@dataclass(frozen=True)
class AchievementRule:
    """Unlocks once `counters[counter] >= threshold`."""

    id: str
    name: str
    description: str
    category: str
    counter: str
    threshold: float


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    # Course completions
    AchievementRule("first-steps", "First Steps", "Complete your first course", "course", "total_courses_completed", 1),
    AchievementRule("learning-specialist-i", "Learning Specialist I", "Complete 5 courses", "course", "total_courses_completed", 5),
    AchievementRule("learning-specialist-ii", "Learning Specialist II", "Complete 10 courses", "course", "total_courses_completed", 10),
    AchievementRule("learning-specialist-iii", "Learning Specialist III", "Complete 15 courses", "course", "total_courses_completed", 15),
    AchievementRule("learning-master", "Learning Master", "Complete 25 courses", "course", "total_courses_completed", 25),
    # Module milestones
    AchievementRule("module-explorer", "Module Explorer", "Complete 10 modules", "milestone", "total_modules_completed", 10),
    AchievementRule("module-marathoner", "Module Marathoner", "Complete 50 modules", "milestone", "total_modules_completed", 50),
    # Assessments
    AchievementRule("first-try", "First Try", "Pass an assessment", "assessment", "total_assessments_passed", 1),
    AchievementRule("perfect-score", "Perfect Score", "Keep a 100% average score", "assessment", "average_score", 100),
    # Streaks
    AchievementRule("streak-master", "Streak Master", "Stay active 7 days in a row", "streak", "current_streak", 7),
    AchievementRule("streak-champion", "Streak Champion", "Stay active 30 days in a row", "streak", "current_streak", 30),
)

RULES_BY_ID = {rule.id: rule for rule in ACHIEVEMENT_RULES}


def _counter(counters: Mapping[str, Any], name: str) -> float:
    value = counters.get(name) or 0
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0


def evaluate_achievements(
    counters: Mapping[str, Any], unlocked: Iterable[str] = ()
) -> list[str]:
    """Ids of rules satisfied by `counters` that are not yet in `unlocked`."""
    already = set(unlocked)
    return [
        rule.id
        for rule in ACHIEVEMENT_RULES
        if rule.id not in already and _counter(counters, rule.counter) >= rule.threshold
    ]


def build_summary(
    counters: Mapping[str, Any],
    unlocked: Iterable[str],
    level_state: LevelState,
    badges: Iterable[str] = (),
) -> dict[str, Any]:
    """Assemble the learner-facing achievement/streak summary."""
    unlocked_ids = set(unlocked)

    next_by_category: dict[str, dict[str, Any]] = {}
    for rule in ACHIEVEMENT_RULES:
        if rule.id in unlocked_ids or rule.category in next_by_category:
            continue
        value = _counter(counters, rule.counter)
        next_by_category[rule.category] = {
            "id": rule.id,
            "name": rule.name,
            "description": rule.description,
            "current": value,
            "target": rule.threshold,
            "remaining": max(rule.threshold - value, 0),
        }

    return {
        "level": level_state.level,
        "rank": get_rank_name(level_state.level),
        "level_band": get_achievement_for_level(level_state.level),
        "progress_percent": level_state.progress_percent,
        "counters": dict(counters),
        "badges": [get_badge_info(b) or {"id": b} for b in badges],
        "achievements": [
            {
                "id": rule.id,
                "name": rule.name,
                "description": rule.description,
                "category": rule.category,
            }
            for rule in ACHIEVEMENT_RULES
            if rule.id in unlocked_ids
        ],
        "next_achievements": list(next_by_category.values()),
    }
