"""Tests for pass-rate stats."""

import pytest

import analytics
import progress


class TestPassRate:

    @pytest.mark.parametrize("passes,attempts,expected", [
        (0, 0, 0),
        (0, 5, 0),
        (1, 2, 50),
        (2, 3, 67),
        (1, 3, 33),
        (1, 8, 13),
        (4, 4, 100),
    ])
    def test_pass_rate(self, passes, attempts, expected):
        assert analytics.pass_rate(passes, attempts) == expected


class TestStatsEndpoint:
    """Tests for GET /api/stats."""

    def test_stats_without_attempts(self, client, register):
        headers = register()
        response = client.get("/api/stats", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"stats": {"total_attempts": 0, "total_passes": 0, "pass_rate": 0}}

    def test_example_scenario(self, client):
        registered = client.post("/api/auth/register", json={"username": "alice", "password": "pw123"})
        assert registered.status_code == 201
        headers = {"Authorization": f"Bearer {registered.json()['token']}"}

        first = client.post(
            "/api/progress",
            json={"quiz_name": "ch1", "passed": True, "score": 8, "total_questions": 10},
            headers=headers,
        )
        assert first.json()["progress"]["attempts"] == 1
        assert first.json()["progress"]["passes"] == 1

        second = client.post(
            "/api/progress",
            json={"quiz_name": "ch1", "passed": False, "score": 4, "total_questions": 10},
            headers=headers,
        )
        assert second.json()["progress"]["attempts"] == 2
        assert second.json()["progress"]["passes"] == 1

        stats = client.get("/api/stats", headers=headers).json()["stats"]
        assert stats == {"total_attempts": 2, "total_passes": 1, "pass_rate": 50}

    def test_stats_ignore_reset_quizzes(self, client, register):
        headers = register()
        for quiz_name, passed in (("ch1", True), ("ch2", False), ("ch2", False)):
            client.post("/api/progress", json={"quiz_name": quiz_name, "passed": passed}, headers=headers)
        client.delete("/api/progress/ch2", headers=headers)

        stats = client.get("/api/stats", headers=headers).json()["stats"]
        assert stats == {"total_attempts": 1, "total_passes": 1, "pass_rate": 100}


class TestStatsService:

    @pytest.mark.asyncio
    async def test_stats_across_quizzes(self, session, user):
        await progress.record_attempt(session, user.id, "ch1", True, 9, 10)
        await progress.record_attempt(session, user.id, "ch2", False, 3, 10)
        await progress.record_attempt(session, user.id, "ch2", False, 4, 10)

        stats = await analytics.get_stats(session, user.id)
        assert (stats.total_attempts, stats.total_passes, stats.pass_rate) == (3, 1, 33)
