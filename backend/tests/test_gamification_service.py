"""Tests for the database-backed gamification service."""

from contextlib import contextmanager
from datetime import date, timedelta

import pytest
from sqlalchemy.dialects import postgresql

from learnhub.core.app_exceptions import AppError
from learnhub.gamification import service, stores
from learnhub.gamification.constants import MAX_XP_AWARD
from learnhub.gamification.trends import TrendDelta
from learnhub.models.gamification import UserAchievement, XPEvent, XPEventType

TENANT = "tenant-acme"
USER = "user-ada"
MENTOR = "user-grace"
DAY = date(2026, 5, 4)


def _event_types(db, user_id=USER):
    return [e.type for e in service.list_xp_events(db, TENANT, user_id)]


class TestAwardXP:
    def test_creates_stats_on_first_award(self, db):
        result = service.award_xp(db, TENANT, USER, 40, XPEventType.MODULE, "Intro", today=DAY)

        assert result.stats.total_xp == 40
        assert result.level_state.level == 1
        assert result.level_up is False
        assert result.new_level is None
        assert result.xp_awarded == 40

    def test_level_up(self, db):
        result = service.award_xp(db, TENANT, USER, 100, XPEventType.COURSE, today=DAY)

        assert result.level_up is True
        assert result.new_level == 2
        assert result.stats.level == 2
        assert result.new_badges == []

    def test_milestone_badge_on_reaching_level_five(self, db):
        service.award_xp(db, TENANT, USER, 800, XPEventType.COURSE, today=DAY)
        result = service.award_xp(db, TENANT, USER, 12, XPEventType.MODULE, today=DAY)

        assert result.new_level == 5
        assert result.new_badges == ["level-5"]
        assert result.stats.badges == ["level-5"]

    def test_skipping_levels_awards_every_passed_milestone(self, db):
        # 7486 XP reaches level 10 in one award
        result = service.award_xp(db, TENANT, USER, 7486, XPEventType.COURSE, today=DAY)
        assert result.new_level == 10
        assert result.new_badges == ["level-5", "level-10"]

    def test_rejects_amount_above_cap(self, db):
        with pytest.raises(AppError) as exc_info:
            service.award_xp(db, TENANT, USER, MAX_XP_AWARD + 1, XPEventType.MODULE)
        assert exc_info.value.code == "INVALID_XP_AMOUNT"
        assert service.list_xp_events(db, TENANT, USER) == []

    def test_accepts_amount_at_cap(self, db):
        result = service.award_xp(db, TENANT, USER, MAX_XP_AWARD, XPEventType.COURSE, today=DAY)
        assert result.stats.total_xp == MAX_XP_AWARD

    @pytest.mark.parametrize("amount", [0, -10])
    def test_rejects_non_positive_amount(self, db, amount):
        with pytest.raises(AppError) as exc_info:
            service.award_xp(db, TENANT, USER, amount, XPEventType.MODULE)
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "INVALID_XP_AMOUNT"

    def test_rejects_reset_type(self, db):
        with pytest.raises(AppError) as exc_info:
            service.award_xp(db, TENANT, USER, 10, XPEventType.RESET)
        assert exc_info.value.code == "INVALID_XP_TYPE"

    def test_mentor_bonus(self, db):
        result = service.award_xp(
            db, TENANT, USER, 155, XPEventType.COURSE, mentor_id=MENTOR, today=DAY
        )

        assert result.mentor_bonus == 15
        mentor = service.get_or_create_stats(db, TENANT, MENTOR)
        assert mentor.total_xp == 15
        assert _event_types(db, MENTOR) == ["mentor-bonus"]
        assert _event_types(db) == ["course"]

    def test_mentor_bonus_rounds_down_to_nothing(self, db):
        result = service.award_xp(db, TENANT, USER, 9, XPEventType.MODULE, mentor_id=MENTOR)

        assert result.mentor_bonus == 0
        assert service.list_xp_events(db, TENANT, MENTOR) == []

    def test_self_mentoring_earns_no_bonus(self, db):
        result = service.award_xp(db, TENANT, USER, 100, XPEventType.MODULE, mentor_id=USER)
        assert result.mentor_bonus == 0
        assert result.stats.total_xp == 100

    def test_tenants_are_separate(self, db):
        service.award_xp(db, TENANT, USER, 100, XPEventType.MODULE)
        other = service.get_or_create_stats(db, "tenant-other", USER)
        assert other.total_xp == 0


class TestProgressEvents:
    def test_course_completion(self, db):
        result = service.record_course_completion(db, TENANT, USER, "Safety 101", today=DAY)

        assert result.stats.total_courses_completed == 1
        assert result.stats.total_xp == 200
        assert result.new_achievements == ["first-steps"]
        assert service.list_xp_events(db, TENANT, USER)[0].label == "Completed course: Safety 101"

    def test_fifth_course_unlocks_specialist_and_badge(self, db):
        for _ in range(4):
            service.record_course_completion(db, TENANT, USER, today=DAY)
        result = service.record_course_completion(db, TENANT, USER, today=DAY)

        assert result.stats.total_xp == 1000
        assert result.new_level == 5
        assert result.new_badges == ["level-5"]
        assert result.new_achievements == ["learning-specialist-i"]

    def test_achievements_unlock_once(self, db):
        service.record_course_completion(db, TENANT, USER, today=DAY)
        second = service.record_course_completion(db, TENANT, USER, today=DAY)

        assert second.new_achievements == []
        rows = db.query(UserAchievement).filter(UserAchievement.user_id == USER).all()
        assert [r.achievement_id for r in rows] == ["first-steps"]

    def test_module_milestone(self, db):
        for _ in range(9):
            service.record_module_completion(db, TENANT, USER, today=DAY)
        result = service.record_module_completion(db, TENANT, USER, "Wrap-up", today=DAY)

        assert result.stats.total_modules_completed == 10
        assert result.stats.total_xp == 500
        assert result.new_achievements == ["module-explorer"]

    def test_perfect_first_attempt(self, db):
        result = service.record_assessment(db, TENANT, USER, 100, first_attempt=True, today=DAY)

        assert result.xp_awarded == 300
        assert result.stats.total_assessments_passed == 1
        assert result.stats.average_score == 100
        assert set(result.new_achievements) == {"first-try", "perfect-score"}
        assert sorted(_event_types(db)) == ["assessment", "assessment", "perfect-score"]

    def test_failed_assessment_awards_nothing(self, db):
        result = service.record_assessment(db, TENANT, USER, 69, first_attempt=True, today=DAY)

        assert result.xp_awarded == 0
        assert result.stats.total_assessments_passed == 0
        assert result.stats.total_assessments_taken == 1
        assert service.list_xp_events(db, TENANT, USER) == []
        assert result.stats.current_streak == 0
        assert result.stats.last_activity_date is None

    def test_average_score_is_running_mean(self, db):
        service.record_assessment(db, TENANT, USER, 100, today=DAY)
        result = service.record_assessment(db, TENANT, USER, 50, today=DAY)

        assert result.stats.average_score == pytest.approx(75.0)
        assert result.stats.total_assessments_passed == 1

    def test_rejects_out_of_range_score(self, db):
        with pytest.raises(AppError) as exc_info:
            service.record_assessment(db, TENANT, USER, 120)
        assert exc_info.value.code == "INVALID_SCORE"


class TestDailyLogin:
    def test_once_per_day(self, db):
        first = service.record_daily_login(db, TENANT, USER, today=DAY)
        again = service.record_daily_login(db, TENANT, USER, today=DAY)

        assert first.xp_awarded == 10
        assert again.xp_awarded == 0
        assert again.stats.total_xp == 10

    def test_weekly_streak_bonus(self, db):
        results = [
            service.record_daily_login(db, TENANT, USER, today=DAY + timedelta(days=n))
            for n in range(7)
        ]

        assert [r.xp_awarded for r in results] == [10] * 6 + [35]
        assert results[-1].stats.current_streak == 7
        assert results[-1].stats.total_xp == 95
        assert "streak-master" in results[-1].new_achievements

    def test_gap_resets_streak(self, db):
        service.record_daily_login(db, TENANT, USER, today=DAY)
        service.record_daily_login(db, TENANT, USER, today=DAY + timedelta(days=1))
        result = service.record_daily_login(db, TENANT, USER, today=DAY + timedelta(days=5))

        assert result.stats.current_streak == 1
        assert result.stats.longest_streak == 2

    def test_other_activity_counts_toward_streak(self, db):
        service.record_module_completion(db, TENANT, USER, today=DAY)
        result = service.record_daily_login(db, TENANT, USER, today=DAY + timedelta(days=1))
        assert result.stats.current_streak == 2

    def test_activity_earlier_the_same_day_is_not_double_counted(self, db):
        service.record_module_completion(db, TENANT, USER, today=DAY)
        result = service.record_daily_login(db, TENANT, USER, today=DAY)

        assert result.xp_awarded == 10
        assert result.stats.current_streak == 1
        assert result.stats.last_login_date == DAY


class TestStatsRow:
    def test_row_is_locked_for_update(self, db):
        query = service.stats_query(db, TENANT, USER)
        sql = str(query.statement.compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" in sql

    def test_totals_accumulate_on_one_row(self, db):
        service.award_xp(db, TENANT, USER, 50, XPEventType.MODULE, today=DAY)
        service.award_xp(db, TENANT, USER, 50, XPEventType.MODULE, today=DAY)

        stats = service.get_or_create_stats(db, TENANT, USER)
        assert stats.total_xp == 100
        assert stats.total_xp == sum(e.amount for e in service.list_xp_events(db, TENANT, USER))


class TestResetAndLedger:
    def test_reset_keeps_badges_and_balances_ledger(self, db):
        service.award_xp(db, TENANT, USER, 900, XPEventType.COURSE, today=DAY)
        stats = service.reset_xp(db, TENANT, USER, reason="Season rollover")

        assert stats.total_xp == 0
        assert stats.level == 1
        assert stats.badges == ["level-5"]

        events = service.list_xp_events(db, TENANT, USER)
        assert events[0].type == "reset"
        assert events[0].amount == -900
        assert events[0].label == "Season rollover"
        assert sum(e.amount for e in events) == 0

    def test_reset_with_no_xp_writes_no_event(self, db):
        service.reset_xp(db, TENANT, USER)
        assert service.list_xp_events(db, TENANT, USER) == []

    def test_ledger_is_newest_first_and_limited(self, db):
        for amount in (10, 20, 30):
            service.award_xp(db, TENANT, USER, amount, XPEventType.MODULE, today=DAY)

        events = service.list_xp_events(db, TENANT, USER, limit=2)
        assert [e.amount for e in events] == [30, 20]
        assert db.query(XPEvent).count() == 3


class TestSummary:
    def test_summary(self, db):
        service.record_course_completion(db, TENANT, USER, today=DAY)
        summary = service.get_summary(db, TENANT, USER)

        assert summary["total_xp"] == 200
        assert summary["level"] == 2
        assert summary["counters"]["total_courses_completed"] == 1
        assert [a["id"] for a in summary["achievements"]] == ["first-steps"]


class TestDashboardTrends:
    def test_baseline_is_per_user(self, db):
        assert service.compute_dashboard_trends(db, TENANT, USER, {"total_xp": 200}) == {
            "total_xp": None
        }
        assert service.compute_dashboard_trends(db, TENANT, MENTOR, {"total_xp": 400}) == {
            "total_xp": None
        }

        trends = service.compute_dashboard_trends(db, TENANT, USER, {"total_xp": 250})
        assert trends == {"total_xp": TrendDelta(25)}

    def test_busy_lock_returns_null_trends_and_keeps_baseline(self, db, monkeypatch):
        service.compute_dashboard_trends(db, TENANT, USER, {"total_xp": 200})

        @contextmanager
        def held_lock(lock_key, ttl_seconds=5):
            yield False

        monkeypatch.setattr(stores, "redis_lock", held_lock)
        trends = service.compute_dashboard_trends(db, TENANT, USER, {"total_xp": 1, "courses": 3})
        assert trends == {"total_xp": None, "courses": None}

        monkeypatch.undo()
        trends = service.compute_dashboard_trends(db, TENANT, USER, {"total_xp": 250})
        assert trends == {"total_xp": TrendDelta(25)}
