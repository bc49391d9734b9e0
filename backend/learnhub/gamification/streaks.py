"""Consecutive-day activity streaks."""

from datetime import date, timedelta
from typing import Iterable


def advance_streak(
    current_streak: int,
    longest_streak: int,
    last_activity: date | None,
    today: date,
) -> tuple[int, int]:
    """
    Apply one day of activity to a stored streak.

    Same day keeps the streak, the following day extends it and any gap
    restarts it at 1. Activity dated before the last recorded day (clock
    skew between callers) leaves the streak as it is.

    Returns:
        (current_streak, longest_streak)
    """
    if last_activity is None:
        current = 1
    elif today == last_activity:
        current = max(current_streak, 1)
    elif today == last_activity + timedelta(days=1):
        current = current_streak + 1
    elif today < last_activity:
        current = max(current_streak, 1)
    else:
        current = 1
    return current, max(longest_streak, current)


def compute_streak(activity_dates: Iterable[date], today: date) -> tuple[int, int]:
    """
    Current and longest streak from a set of activity days.

    The current streak counts back from today, or from yesterday when there
    is no activity today yet (the streak is still alive until the day ends).
    """
    days = sorted({d for d in activity_dates if d <= today})
    if not days:
        return 0, 0

    longest = run = 1
    for previous, day in zip(days, days[1:]):
        run = run + 1 if day - previous == timedelta(days=1) else 1
        longest = max(longest, run)

    day_set = set(days)
    cursor = today if today in day_set else today - timedelta(days=1)
    current = 0
    while cursor in day_set:
        current += 1
        cursor -= timedelta(days=1)

    return current, longest
