"""
HTTP surface end-to-end through FastAPI's TestClient, backed by a
throwaway SQLite file.
"""
from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from main import app
from services.db import get_session, init_models, sessionmaker_for


@pytest.fixture
def client(db_url):
    eng = create_async_engine(db_url, poolclass=NullPool)
    asyncio.run(init_models(eng))
    sessions = sessionmaker_for(eng)

    async def _session():
        async with sessions() as s:
            yield s

    app.dependency_overrides[get_session] = _session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    asyncio.run(eng.dispose())


def _register(client, email="dana@example.com", **profile) -> dict:
    body = {"email": email, "age": 30, "sex": "male", "activity_level": "sedentary", **profile}
    r = client.post("/api/v1/users", json=body)
    assert r.status_code == 201, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_requests_without_token_are_rejected(client):
    r = client.get("/api/v1/targets/today")
    assert r.status_code == 401
    assert r.json()["error"] == "unauthorized"
    assert r.headers["www-authenticate"] == "Bearer"

    r = client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_duplicate_email(client):
    _register(client)
    r = client.post("/api/v1/users", json={"email": "dana@example.com"})
    assert r.status_code == 409


def test_target_lifecycle(client):
    auth = _register(client)

    r = client.post("/api/v1/biometrics", json={"weight_kg": 80, "height_cm": 180}, headers=auth)
    assert r.status_code == 201
    r = client.post("/api/v1/goals", json={"goal_type": "weight_loss"}, headers=auth)
    assert r.status_code == 201 and r.json()["is_active"] is True

    r = client.post("/api/v1/targets/propose", json={"activity_multiplier": 1.5}, headers=auth)
    assert r.status_code == 201, r.text
    rec = r.json()["recommendation"]
    assert (rec["bmr"], rec["tdee"], rec["deficit"]) == (1780, 2670, 500)
    assert rec["daily_calories"] == 2170
    assert rec["daily_protein"] == 160
    day = r.json()["target"]["date"]

    # proposed is not yet today's target
    assert client.get("/api/v1/targets/today", headers=auth).json() is None
    assert client.get(f"/api/v1/targets/{day}/pending", headers=auth).json()["calories_target"] == 2170

    r = client.post(f"/api/v1/targets/{day}/accept", headers=auth)
    assert r.status_code == 200 and r.json()["is_accepted"] is True

    today = client.get("/api/v1/targets/today", headers=auth).json()
    assert today["calories_target"] == 2170
    assert "deficit" in today["reasoning"].lower()


def test_recommendation_needs_weight(client):
    auth = _register(client)
    r = client.post("/api/v1/targets/recommendation", json={}, headers=auth)
    assert r.status_code == 422
    assert r.json()["error"] == "insufficient_data"


def test_accept_without_proposal_is_404(client):
    auth = _register(client)
    r = client.post("/api/v1/targets/2026-03-01/accept", headers=auth)
    assert r.status_code == 404


def test_meal_logging_and_progress(client):
    auth = _register(client)
    client.post("/api/v1/biometrics", json={"weight_kg": 80, "height_cm": 180}, headers=auth)
    client.post("/api/v1/targets/propose", json={"date": "2026-03-01"}, headers=auth)
    client.post("/api/v1/targets/2026-03-01/accept", headers=auth)

    r = client.post(
        "/api/v1/meals",
        json={
            "meal_name": "Oats",
            "logged_at": "2026-03-01T07:30:00",
            "items": [
                {"name": "oats", "quantity_grams": 80, "nutrition": {"kcal": 300, "g_protein": 10, "g_carb": 54, "g_fat": 5}},
                {"name": "milk", "quantity_ml": 200, "nutrition": {"kcal": 100, "g_protein": 7, "g_carb": 10, "g_fat": 4}},
            ],
        },
        headers=auth,
    )
    assert r.status_code == 201, r.text
    meal = r.json()
    assert meal["meal_type"] == "breakfast"
    assert meal["date"] == "2026-03-01"
    assert meal["kcal_total"] == 400
    assert len(meal["items"]) == 2

    client.post(
        "/api/v1/meals",
        json={"meal_name": "Planned lunch", "date": "2026-03-01", "meal_type": "lunch",
              "kcal_total": 700, "status": "planned"},
        headers=auth,
    )

    r = client.get("/api/v1/meals/progress", params={"day": "2026-03-01"}, headers=auth)
    assert r.status_code == 200
    prog = r.json()
    assert prog["target_id"] is not None
    assert prog["calories"]["consumed"] == 400
    assert prog["protein"]["consumed"] == 17
    assert prog["calories"]["over"] is False
    assert "breakfast: Oats" in prog["context"]

    listed = client.get("/api/v1/meals", params={"day": "2026-03-01"}, headers=auth).json()
    assert [m["meal_name"] for m in listed] == ["Oats", "Planned lunch"]


def test_meals_are_private(client):
    alice = _register(client, email="alice@example.com")
    bob = _register(client, email="bob@example.com")
    meal_id = client.post(
        "/api/v1/meals", json={"meal_name": "Toast", "kcal_total": 250}, headers=alice
    ).json()["id"]

    assert client.delete(f"/api/v1/meals/{meal_id}", headers=bob).status_code == 404
    assert client.patch(f"/api/v1/meals/{meal_id}", json={"kcal_total": 1}, headers=bob).status_code == 404
    assert client.delete(f"/api/v1/meals/{meal_id}", headers=alice).status_code == 204


def test_preferences_feed_context(client):
    auth = _register(client)
    r = client.post(
        "/api/v1/users/me/preferences",
        json={"type": "allergy", "food_name": "peanuts"},
        headers=auth,
    )
    assert r.status_code == 201, r.text
    prog = client.get("/api/v1/meals/progress", params={"day": "2026-03-01"}, headers=auth).json()
    assert prog["context"].startswith("User preferences: allergy: peanuts")
    assert prog["target_id"] is None


def test_missing_rows_share_error_shape(client):
    auth = _register(client)
    for path in ("/api/v1/goals/active", "/api/v1/biometrics/latest"):
        r = client.get(path, headers=auth)
        assert r.status_code == 404
        assert r.json()["error"] == "not_found"

    r = client.post("/api/v1/biometrics", json={}, headers=auth)
    assert r.status_code == 422
    assert r.json()["error"] == "insufficient_data"

    r = client.post("/api/v1/users", json={"email": "dana@example.com"})
    assert r.status_code == 409 and r.json()["error"] == "already_exists"


def test_quick_add_flow(client):
    auth = _register(client)
    brand = client.post(
        "/api/v1/library/brands", json={"name": "Watchouse", "type": "restaurant"}, headers=auth
    ).json()
    r = client.post(
        "/api/v1/library/items",
        json={"name": "Salmon avocado toast", "brand_id": brand["id"], "kcal_per_serving": 520,
              "g_protein_per_serving": 28, "g_carb_per_serving": 40, "g_fat_per_serving": 27},
        headers=auth,
    )
    assert r.status_code == 201, r.text
    item = r.json()
    assert item["brand"]["name"] == "Watchouse" and item["times_used"] == 0

    matches = client.get("/api/v1/library/items/match", params={"q": "watchouse"}, headers=auth).json()
    assert [m["id"] for m in matches] == [item["id"]]

    r = client.post(
        f"/api/v1/library/items/{item['id']}/log",
        json={"servings": 1, "logged_at": "2026-03-01T12:30:00"},
        headers=auth,
    )
    assert r.status_code == 201, r.text
    meal = r.json()
    assert meal["meal_name"] == "Salmon avocado toast (Watchouse)"
    assert meal["meal_type"] == "lunch" and meal["kcal_total"] == 520

    listed = client.get("/api/v1/library/items", headers=auth).json()
    assert listed[0]["times_used"] == 1

    r = client.post(f"/api/v1/library/items/{item['id']}/use", headers=auth)
    assert r.status_code == 200 and r.json()["times_used"] == 2

    r = client.post(
        "/api/v1/library/supplements",
        json={"saved_item_id": item["id"], "preferred_times": ["25:00"]},
        headers=auth,
    )
    assert r.status_code == 422


def test_chat_and_move_to_yesterday(client):
    auth = _register(client)
    client.post("/api/v1/meals", json={"meal_name": "Midnight ramen", "date": "2026-03-02"}, headers=auth)
    r = client.post(
        "/api/v1/chat", json={"role": "user", "content": "ramen", "date": "2026-03-02"}, headers=auth
    )
    assert r.status_code == 201, r.text

    r = client.post("/api/v1/meals/convert-to-yesterday", params={"day": "2026-03-02"}, headers=auth)
    assert r.json() == {"moved_meals": 1, "moved_messages": 1, "to_date": "2026-03-01"}

    chat = client.get("/api/v1/chat", params={"day": "2026-03-01"}, headers=auth).json()
    assert [m["content"] for m in chat] == ["ramen"]
    assert client.get("/api/v1/meals", params={"day": "2026-03-02"}, headers=auth).json() == []
