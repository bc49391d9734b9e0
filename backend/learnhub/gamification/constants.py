"""Constants for XP, levels, ranks and badges."""

from enum import Enum

# Level curve: requirement(level) = floor(BASE_LEVEL_XP * LEVEL_GROWTH ** (level - 1))
BASE_LEVEL_XP = 100
LEVEL_GROWTH = 1.5
MAX_LEVEL = 200


class XPReward(int, Enum):
    """XP granted per learning event."""

    MODULE_COMPLETE = 50
    COURSE_COMPLETE = 200
    ASSESSMENT_PASS = 100
    ASSESSMENT_PERFECT = 150
    DAILY_LOGIN = 10
    STREAK_BONUS = 25
    FIRST_TRY_BONUS = 50


ASSESSMENT_PASS_SCORE = 70
ASSESSMENT_PERFECT_SCORE = 100

# Largest single XP award accepted from callers
MAX_XP_AWARD = 100_000

# Streak bonus is granted on every Nth consecutive login day
STREAK_BONUS_INTERVAL = 7

# One rank tier per LEVELS_PER_RANK levels, saturating at the last entry
LEVELS_PER_RANK = 4
RANK_NAMES = (
    "Novice",
    "Learner",
    "Student",
    "Scholar",
    "Expert",
    "Master",
    "Grandmaster",
    "Legend",
)

# Milestone badges, keyed by the level that unlocks them
LEVEL_BADGES: dict[int, dict[str, str]] = {
    5: {"id": "level-5", "name": "Rising Star", "description": "Reached level 5"},
    10: {"id": "level-10", "name": "Dedicated Learner", "description": "Reached level 10"},
    25: {"id": "level-25", "name": "Knowledge Seeker", "description": "Reached level 25"},
    50: {"id": "level-50", "name": "Expert Learner", "description": "Reached level 50"},
    75: {"id": "level-75", "name": "Master Scholar", "description": "Reached level 75"},
    100: {"id": "level-100", "name": "Centurion", "description": "Reached level 100"},
    150: {"id": "level-150", "name": "Elite Scholar", "description": "Reached level 150"},
    200: {"id": "level-200", "name": "Grand Master", "description": "Reached the level cap"},
}

# Level-range achievement bands (inclusive bounds)
LEVEL_ACHIEVEMENTS = (
    {"id": "novice", "name": "Novice", "min_level": 1, "max_level": 10},
    {"id": "apprentice", "name": "Apprentice", "min_level": 11, "max_level": 25},
    {"id": "scholar", "name": "Scholar", "min_level": 26, "max_level": 50},
    {"id": "expert", "name": "Expert", "min_level": 51, "max_level": 100},
    {"id": "master", "name": "Master", "min_level": 101, "max_level": MAX_LEVEL},
)

TREND_LABEL = "vs. previous"

# Standard dashboard metrics; callers may submit other flat numeric metrics too
DASHBOARD_METRICS = (
    "total_courses",
    "enrolled_courses",
    "completed_courses",
    "total_xp",
    "average_progress",
)

SNAPSHOT_STORAGE_KEY = "dashboard_stats_previous"
