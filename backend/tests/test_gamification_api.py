"""API tests for gamification endpoints."""

import pytest

from learnhub.core.config import settings

BASE = f"{settings.API_PREFIX}/gamification"


class TestLevelEndpoint:
    def test_level_for_xp(self, client):
        response = client.get(f"{BASE}/level", params={"xp": 100})

        assert response.status_code == 200
        assert response.json() == {
            "total_xp": 100,
            "level": 2,
            "current_level_xp": 0,
            "next_level_xp": 150,
            "progress_percent": 0.0,
            "rank": "Novice",
        }

    def test_negative_xp_is_clamped(self, client):
        data = client.get(f"{BASE}/level", params={"xp": -50}).json()
        assert data["total_xp"] == 0
        assert data["level"] == 1

    def test_missing_xp_is_validation_error(self, client):
        response = client.get(f"{BASE}/level")

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["request_id"]


class TestTrendDiffEndpoint:
    def test_diff(self, client):
        response = client.post(
            f"{BASE}/trends",
            json={
                "current": {"total_xp": 50, "completed_courses": 250, "average_progress": 1005},
                "previous": {"total_xp": 0, "completed_courses": 200, "average_progress": 1000},
            },
        )

        assert response.status_code == 200
        assert response.json()["trends"] == {
            "total_xp": {"percent_change": 100, "label": "vs. previous"},
            "completed_courses": {"percent_change": 25, "label": "vs. previous"},
            "average_progress": None,
        }

    def test_without_previous(self, client):
        response = client.post(f"{BASE}/trends", json={"current": {"total_xp": 500}})
        assert response.json()["trends"] == {"total_xp": None}

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_values_rejected(self, client, literal):
        response = client.post(
            f"{BASE}/trends",
            content=f'{{"current": {{"a": 5}}, "previous": {{"a": {literal}}}}}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestIdentity:
    def test_missing_headers(self, client):
        response = client.get(f"{BASE}/me")

        assert response.status_code == 401
        assert response.json()["error_code"] == "IDENTITY_REQUIRED"

    def test_blank_user_header(self, client):
        response = client.get(f"{BASE}/me", headers={"X-Tenant-Id": "t", "X-User-Id": "  "})
        assert response.status_code == 401


class TestCallerProgress:
    def test_fresh_user_stats(self, client, caller_headers):
        response = client.get(f"{BASE}/me", headers=caller_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["tenant_id"] == caller_headers["X-Tenant-Id"]
        assert data["total_xp"] == 0
        assert data["level_state"]["next_level_xp"] == 100

    def test_award_xp(self, client, caller_headers):
        response = client.post(
            f"{BASE}/me/xp",
            json={"amount": 150, "type": "module", "label": "Bonus", "mentor_id": "user-grace"},
            headers=caller_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["level_up"] is True
        assert data["new_level"] == 2
        assert data["mentor_bonus"] == 15
        assert data["stats"]["total_xp"] == 150

    def test_award_non_positive_xp(self, client, caller_headers):
        response = client.post(
            f"{BASE}/me/xp", json={"amount": 0, "type": "module"}, headers=caller_headers
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "INVALID_XP_AMOUNT"
        assert body["details"] == {"amount": 0}

    def test_award_above_cap(self, client, caller_headers):
        response = client.post(
            f"{BASE}/me/xp", json={"amount": 10**20, "type": "module"}, headers=caller_headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_XP_AMOUNT"
        assert client.get(f"{BASE}/me", headers=caller_headers).json()["total_xp"] == 0

    def test_award_unknown_type(self, client, caller_headers):
        response = client.post(
            f"{BASE}/me/xp", json={"amount": 10, "type": "bribe"}, headers=caller_headers
        )
        assert response.status_code == 422

    def test_course_completion_without_body(self, client, caller_headers):
        response = client.post(f"{BASE}/me/courses/complete", headers=caller_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["xp_awarded"] == 200
        assert data["new_achievements"] == ["first-steps"]

    def test_module_completion(self, client, caller_headers):
        response = client.post(
            f"{BASE}/me/modules/complete",
            json={"module_title": "Fire exits"},
            headers=caller_headers,
        )
        assert response.json()["stats"]["total_modules_completed"] == 1

    def test_assessment(self, client, caller_headers):
        response = client.post(
            f"{BASE}/me/assessments",
            json={"score": 100, "first_attempt": True},
            headers=caller_headers,
        )

        assert response.status_code == 200
        assert response.json()["xp_awarded"] == 300

    @pytest.mark.parametrize("score", [-1, 101])
    def test_assessment_score_out_of_range(self, client, caller_headers, score):
        response = client.post(
            f"{BASE}/me/assessments", json={"score": score}, headers=caller_headers
        )
        assert response.status_code == 422

    def test_daily_login_once(self, client, caller_headers):
        first = client.post(f"{BASE}/me/login", headers=caller_headers).json()
        second = client.post(f"{BASE}/me/login", headers=caller_headers).json()

        assert first["xp_awarded"] == 10
        assert second["xp_awarded"] == 0
        assert second["stats"]["current_streak"] == 1

    def test_summary_and_ledger(self, client, caller_headers):
        client.post(f"{BASE}/me/courses/complete", headers=caller_headers)
        client.post(f"{BASE}/me/modules/complete", headers=caller_headers)

        summary = client.get(f"{BASE}/me/summary", headers=caller_headers).json()
        assert summary["total_xp"] == 250
        assert summary["rank"] == "Novice"
        assert summary["level_band"]["id"] == "novice"
        assert [a["id"] for a in summary["achievements"]] == ["first-steps"]

        events = client.get(
            f"{BASE}/me/xp-events", params={"limit": 1}, headers=caller_headers
        ).json()
        assert len(events) == 1
        assert events[0]["type"] == "module"
        assert events[0]["amount"] == 50

    def test_users_are_isolated_by_tenant(self, client, caller_headers):
        client.post(f"{BASE}/me/courses/complete", headers=caller_headers)
        other_tenant = {**caller_headers, "X-Tenant-Id": "tenant-other"}

        assert client.get(f"{BASE}/me", headers=other_tenant).json()["total_xp"] == 0


class TestReset:
    def test_reset_user_xp(self, client, caller_headers):
        learner = {**caller_headers, "X-User-Id": "user-lin"}
        client.post(f"{BASE}/me/xp", json={"amount": 900, "type": "course"}, headers=learner)

        response = client.post(
            f"{BASE}/users/user-lin/xp/reset",
            json={"reason": "Duplicate import"},
            headers=caller_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "user-lin"
        assert data["total_xp"] == 0
        assert data["badges"] == ["level-5"]

        events = client.get(f"{BASE}/me/xp-events", headers=learner).json()
        assert events[0]["type"] == "reset"
        assert events[0]["amount"] == -900
        assert events[0]["label"] == "Duplicate import"
