"""
Integration tests for the HTTP routes.
"""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from form_journal.config import Settings
from form_journal.main import create_app


ANALYSIS = {
    "exercise_type": "squat",
    "fitness_level": "beginner",
    "form_score": 82,
    "analysis": "Solid depth, slight forward lean.",
    "recommendations": ["Keep weight on heels", "Film from the side"],
    "media_type": "video",
}


class TestAPIRoutes:
    """Test suite for API routes."""

    @pytest.fixture
    def client(self, database_url):
        """Create a test client backed by a fresh database."""
        app = create_app(Settings(database_url=database_url))
        with TestClient(app) as client:
            yield client

    def test_health_check(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_insert_returns_saved_id(self, client):
        first = client.post("/api/analyses", json=ANALYSIS)
        second = client.post("/api/analyses", json={**ANALYSIS, "exercise_type": "pushup"})

        assert first.status_code == 200
        assert first.json()["saved"] is True
        assert second.json()["id"] > first.json()["id"]

    def test_insert_requires_score(self, client):
        payload = {k: v for k, v in ANALYSIS.items() if k != "form_score"}
        response = client.post("/api/analyses", json=payload)
        assert response.status_code == 422

    def test_list_and_paginate(self, client):
        for day in range(1, 4):
            client.post("/api/analyses", json={
                **ANALYSIS,
                "form_score": day,
                "created_at": f"2024-06-0{day}T10:00:00.000Z"
            })

        page = client.get("/api/analyses", params={"limit": 2, "offset": 1}).json()
        assert [r["form_score"] for r in page] == [2, 1]

        recent = client.get("/api/analyses/recent", params={"limit": 1}).json()
        assert recent[0]["form_score"] == 3
        assert recent[0]["created_at"] == "2024-06-03T10:00:00.000Z"

    def test_negative_offset_rejected(self, client):
        response = client.get("/api/analyses", params={"offset": -1})
        assert response.status_code == 422

    def test_by_exercise(self, client):
        client.post("/api/analyses", json=ANALYSIS)
        client.post("/api/analyses", json={**ANALYSIS, "exercise_type": "plank"})

        response = client.get("/api/analyses/exercise/plank")

        assert response.status_code == 200
        assert [r["exercise_type"] for r in response.json()] == ["plank"]

    def test_statistics_on_empty_store(self, client):
        assert client.get("/api/statistics/summary").json() == {
            "total_analyses": 0,
            "average_score": 0,
            "current_streak": 0,
            "improvement_rate": 0,
        }
        assert client.get("/api/statistics/distribution").json() == []

    def test_statistics_after_inserts(self, client):
        client.post("/api/analyses", json={**ANALYSIS, "form_score": 80})
        client.post("/api/analyses", json={**ANALYSIS, "form_score": 90})
        client.post("/api/analyses", json={**ANALYSIS, "exercise_type": "pushup", "form_score": 70})

        summary = client.get("/api/statistics/summary").json()
        assert summary["total_analyses"] == 3
        assert summary["average_score"] == 80
        assert summary["current_streak"] == 3

        distribution = client.get("/api/statistics/distribution").json()
        assert distribution == [
            {"exercise_type": "squat", "count": 2, "avg_score": 85},
            {"exercise_type": "pushup", "count": 1, "avg_score": 70},
        ]

    def test_progress(self, client):
        client.post("/api/analyses", json=ANALYSIS)

        progress = client.get("/api/statistics/progress").json()

        assert progress["stats"]["total_analyses"] == 1
        assert len(progress["recent_analyses"]) == 1
        assert progress["distribution"][0]["exercise_type"] == "squat"


class TestConfiguredApp:

    def test_windows_and_recent_limit_come_from_app_settings(self, database_url):
        app = create_app(Settings(
            database_url=database_url,
            streak_window_days=1,
            trend_window_days=2,
            recent_limit=1
        ))
        three_days_ago = datetime.now(timezone.utc) - timedelta(days=3)

        with TestClient(app) as client:
            client.post("/api/analyses", json={
                **ANALYSIS,
                "form_score": 50,
                "created_at": three_days_ago.isoformat(timespec="milliseconds").replace("+00:00", "Z")
            })
            client.post("/api/analyses", json={**ANALYSIS, "form_score": 80})

            summary = client.get("/api/statistics/summary").json()
            progress = client.get("/api/statistics/progress").json()

        assert summary["current_streak"] == 1
        assert summary["improvement_rate"] == 30
        assert len(progress["recent_analyses"]) == 1
        assert progress["recent_analyses"][0]["form_score"] == 80
        assert progress["stats"] == summary


class TestUnavailableStorage:

    def test_startup_fails_without_storage(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        app = create_app(Settings(database_url=f"sqlite+aiosqlite:///{blocker / 'journal.db'}"))

        with pytest.raises(Exception):
            with TestClient(app):
                pass

    def test_closed_store_maps_to_503(self, database_url):
        app = create_app(Settings(database_url=database_url))
        with TestClient(app) as client:
            client.portal.call(app.state.store.close)
            response = client.get("/api/analyses")

        assert response.status_code == 503
