"""
Level curve calculator - pure functions over a user's cumulative XP.

Level N requires floor(100 * 1.5 ** (N - 1)) XP on top of every level below
it, so each level costs 50% more than the previous one:

    level 1 -> 2: 100 XP
    level 2 -> 3: 150 XP
    level 3 -> 4: 225 XP

Nothing here is persisted. A LevelState is always recomputed from the XP
total, so the curve can change without migrating stored data.
"""

import math
from dataclasses import dataclass

from learnhub.gamification.constants import (
    BASE_LEVEL_XP,
    LEVEL_ACHIEVEMENTS,
    LEVEL_BADGES,
    LEVEL_GROWTH,
    LEVELS_PER_RANK,
    MAX_LEVEL,
    RANK_NAMES,
)


@dataclass(frozen=True)
class LevelState:
    """Position of an XP total on the level curve."""

    level: int
    current_level_xp: int
    next_level_xp: int
    progress_percent: float


def requirement_for_level(level: int) -> int:
    """XP needed to advance from `level` to `level + 1`."""
    if level < 1:
        level = 1
    return math.floor(BASE_LEVEL_XP * LEVEL_GROWTH ** (level - 1))


def cumulative_xp_for_level(level: int) -> int:
    """Total XP at which `level` is first reached."""
    level = max(1, min(level, MAX_LEVEL))
    return sum(requirement_for_level(n) for n in range(1, level))


def calculate_level(xp: float) -> LevelState:
    """
    Map a cumulative XP total onto the level curve.

    Negative totals are treated as 0 and fractional totals are floored.
    Iteration stops at MAX_LEVEL; XP past the cap is reported against the
    cap level's requirement and clamped one below it, so progress saturates
    just under 100% and current_level_xp < next_level_xp always holds.

    Args:
        xp: Cumulative experience points

    Returns:
        LevelState for the total
    """
    remaining = max(0, math.floor(xp))
    level = 1
    requirement = requirement_for_level(level)

    while remaining >= requirement and level < MAX_LEVEL:
        remaining -= requirement
        level += 1
        requirement = requirement_for_level(level)

    if remaining >= requirement:
        remaining = requirement - 1

    return LevelState(
        level=level,
        current_level_xp=remaining,
        next_level_xp=requirement,
        progress_percent=(remaining / requirement) * 100,
    )


def get_rank_name(level: int) -> str:
    """Rank title for a level; one tier every LEVELS_PER_RANK levels."""
    index = (max(level, 1) - 1) // LEVELS_PER_RANK
    return RANK_NAMES[min(index, len(RANK_NAMES) - 1)]


def is_milestone_level(level: int) -> bool:
    return level in LEVEL_BADGES


def badges_for_level(level: int) -> list[str]:
    """Ids of every milestone badge earned at or below `level`, ascending."""
    return [badge["id"] for milestone, badge in sorted(LEVEL_BADGES.items()) if milestone <= level]


def new_level_badges(level: int, owned: list[str] | None = None) -> list[str]:
    """Milestone badges earned at `level` that are not already owned."""
    owned_set = set(owned or [])
    return [badge_id for badge_id in badges_for_level(level) if badge_id not in owned_set]


def get_badge_info(badge_id: str) -> dict[str, str] | None:
    for badge in LEVEL_BADGES.values():
        if badge["id"] == badge_id:
            return dict(badge)
    return None


def get_achievement_for_level(level: int) -> dict | None:
    """Level-range achievement band containing `level`."""
    for band in LEVEL_ACHIEVEMENTS:
        if band["min_level"] <= level <= band["max_level"]:
            return dict(band)
    return None
