"""
API tests for the review endpoints.

The app runs against the per-test SQLite database with a frozen clock
and a seeded shuffle injected through FastAPI dependency overrides.
"""

import random

import pytest
from fastapi.testclient import TestClient

from vocab_srs.api.identity import get_clock, get_rng
from vocab_srs.api.main import app
from vocab_srs.core.errors import StorageError
from vocab_srs.db.database import get_session
from vocab_srs.scheduling.review_service import ReviewService

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


@pytest.fixture
def items(make_items):
    return make_items([1, 2, 3, 4, 5, 6])


@pytest.fixture
def client(items, session_factory, clock):
    def _session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_rng] = lambda: random.Random(0)
    yield TestClient(app)
    app.dependency_overrides.clear()


def _start_and_get_review_ids(client, item_ids, headers=ALICE):
    assert client.post("/reviews/start", json={"itemIds": item_ids}, headers=headers).status_code == 200
    today = client.get("/reviews/today", params={"newLimit": 20}, headers=headers).json()
    by_item = {entry["itemId"]: entry["reviewId"] for entry in today["newItems"]}
    return [by_item[item_id] for item_id in item_ids]


class TestHealth:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "vocab-srs"

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["components"]["database"] == "ok"
        assert body["config"]["dev_routes"] is True


class TestStart:
    def test_requires_identity(self, client, items):
        response = client.post("/reviews/start", json={"itemIds": items[:1]})
        assert response.status_code == 400

    def test_created_count_and_idempotency(self, client, items):
        first = client.post("/reviews/start", json={"itemIds": items[:2]}, headers=ALICE)
        second = client.post("/reviews/start", json={"itemIds": items[:3]}, headers=ALICE)

        assert first.json() == {"created": 2}
        assert second.json() == {"created": 1}

    def test_rejects_non_integer_ids(self, client):
        response = client.post("/reviews/start", json={"itemIds": ["1"]}, headers=ALICE)
        assert response.status_code == 422


class TestAnswer:
    def test_first_correct_answer(self, client, items):
        (review_id,) = _start_and_get_review_ids(client, items[:1])

        response = client.post(
            f"/reviews/{review_id}/answer",
            json={"quality": 5, "responseTimeMs": 2100, "userAnswer": "aslema"},
            headers=ALICE,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["interval"] == 1
        assert body["repetitions"] == 1
        assert body["easeFactor"] == pytest.approx(2.6)
        assert body["nextReviewAt"] == "2026-03-11T00:00:00"

    def test_requires_identity(self, client, items):
        (review_id,) = _start_and_get_review_ids(client, items[:1])
        response = client.post(f"/reviews/{review_id}/answer", json={"quality": 4})
        assert response.status_code == 400

    def test_other_users_review_is_forbidden(self, client, items):
        (review_id,) = _start_and_get_review_ids(client, items[:1])

        response = client.post(f"/reviews/{review_id}/answer", json={"quality": 4}, headers=BOB)

        assert response.status_code == 403
        assert response.json()["retryable"] is False

    def test_unknown_review(self, client):
        response = client.post("/reviews/99999/answer", json={"quality": 4}, headers=ALICE)
        assert response.status_code == 404

    @pytest.mark.parametrize("quality", [6, -1, 3.5, "4", None])
    def test_invalid_quality(self, client, items, quality):
        (review_id,) = _start_and_get_review_ids(client, items[:1])

        response = client.post(
            f"/reviews/{review_id}/answer", json={"quality": quality}, headers=ALICE
        )

        assert response.status_code == 422
        stats = client.get("/reviews/stats", headers=ALICE).json()
        assert stats["totalXp"] == 0

    def test_storage_failure_is_retryable(self, client, items, monkeypatch):
        (review_id,) = _start_and_get_review_ids(client, items[:1])

        def failing_submit(self, *args, **kwargs):
            raise StorageError("submit_answer conflicted with a concurrent update")

        monkeypatch.setattr(ReviewService, "submit_answer", failing_submit)

        response = client.post(f"/reviews/{review_id}/answer", json={"quality": 4}, headers=ALICE)

        assert response.status_code == 503
        assert response.json()["retryable"] is True


class TestReads:
    def test_today_shape(self, client):
        body = client.get("/reviews/today", params={"newLimit": 3}, headers=ALICE).json()

        assert set(body) == {
            "dueReviews",
            "newItems",
            "learnedTodayItems",
            "totalDue",
            "totalNew",
            "totalLearnedToday",
        }
        assert body["totalNew"] == 3
        entry = body["newItems"][0]
        assert entry["type"] == "new"
        assert entry["reviewId"] is None
        assert entry["translation"].startswith("fr-")

    def test_anonymous_reads_allowed(self, client):
        assert client.get("/reviews/today").status_code == 200
        assert client.get("/reviews/due").json() == []
        assert client.get("/reviews/stats").json()["totalXp"] == 0

    def test_negative_limit_rejected(self, client):
        assert client.get("/reviews/due", params={"limit": -1}, headers=ALICE).status_code == 422

    def test_stats_after_answer(self, client, items):
        (review_id,) = _start_and_get_review_ids(client, items[:1])
        client.post(f"/reviews/{review_id}/answer", json={"quality": 4}, headers=ALICE)

        stats = client.get("/reviews/stats", headers=ALICE).json()

        assert stats["totalXp"] == 15
        assert stats["currentStreak"] == 1
        assert stats["longestStreak"] == 1
        assert stats["learnedToday"] == 1
        assert stats["dueReviews"] == 0
        assert stats["totalNewAvailable"] == 5

    def test_stats_match_today(self, client, items):
        _start_and_get_review_ids(client, items[:2])

        stats = client.get("/reviews/stats", params={"dailyNewLimit": 4}, headers=ALICE).json()
        today = client.get("/reviews/today", params={"newLimit": 4}, headers=ALICE).json()

        assert stats["newItems"] == today["totalNew"]
        assert stats["dueReviews"] == today["totalDue"]
        assert stats["learnedToday"] == today["totalLearnedToday"]

    def test_due_after_a_day(self, client, items, clock):
        review_ids = _start_and_get_review_ids(client, items[:3])
        for review_id in review_ids:
            client.post(f"/reviews/{review_id}/answer", json={"quality": 4}, headers=ALICE)

        assert client.get("/reviews/due", headers=ALICE).json() == []
        clock.advance(days=1)

        due = client.get("/reviews/due", params={"limit": 2}, headers=ALICE).json()
        assert len(due) == 2
        assert all(entry["type"] == "review" for entry in due)


class TestDevRoutes:
    def test_reset(self, client, items):
        (review_id,) = _start_and_get_review_ids(client, items[:1])
        client.post(f"/reviews/{review_id}/answer", json={"quality": 4}, headers=ALICE)

        response = client.post("/reviews/dev/reset", headers=ALICE)

        assert response.status_code == 200
        stats = client.get("/reviews/stats", headers=ALICE).json()
        assert stats["totalXp"] == 0
        assert stats["totalNewAvailable"] == 6

    def test_reset_requires_identity(self, client):
        assert client.post("/reviews/dev/reset").status_code == 400

    def test_simulate_days_makes_reviews_due(self, client, items):
        (review_id,) = _start_and_get_review_ids(client, items[:1])
        client.post(f"/reviews/{review_id}/answer", json={"quality": 4}, headers=ALICE)

        response = client.post("/reviews/dev/simulate-days", json={"days": 1}, headers=ALICE)

        assert response.status_code == 200
        due = client.get("/reviews/due", headers=ALICE).json()
        assert [entry["reviewId"] for entry in due] == [review_id]

    def test_simulate_days_validates(self, client):
        response = client.post("/reviews/dev/simulate-days", json={"days": 0}, headers=ALICE)
        assert response.status_code == 422
