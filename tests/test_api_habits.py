"""Habit endpoints."""
from datetime import date, timedelta


def create_habit(client, headers, **body):
    body.setdefault("title", "Read")
    resp = client.post("/api/habits", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def test_create_habit_returns_camel_case_with_defaults(client, auth_headers):
    habit = create_habit(client, auth_headers, title="Meditate")

    assert habit["title"] == "Meditate"
    assert habit["frequency"] == "daily"
    assert habit["targetDays"] == [0, 1, 2, 3, 4, 5, 6]
    assert habit["color"] == "#3B82F6"
    assert "ownerId" in habit and "createdAt" in habit


def test_create_habit_requires_title(client, auth_headers):
    resp = client.post("/api/habits", json={"title": "   "}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert "title" in resp.json()["error"]


def test_weekly_habit_needs_target_days(client, auth_headers):
    resp = client.post("/api/habits", json={"title": "Gym", "frequency": "weekly", "targetDays": []},
                       headers=auth_headers)
    assert resp.status_code == 400

    resp = client.post("/api/habits", json={"title": "Gym", "frequency": "weekly", "targetDays": [7]},
                       headers=auth_headers)
    assert resp.status_code == 400


def test_habits_require_authentication(client):
    resp = client.get("/api/habits")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "No token provided"}

    resp = client.get("/api/habits", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


def test_list_and_get_are_owner_scoped(client, register):
    alice = register("alice@example.com")
    bob = register("bob@example.com")
    habit = create_habit(client, alice)

    assert client.get("/api/habits", headers=bob).json()["data"] == []
    resp = client.get(f"/api/habits/{habit['id']}", headers=bob)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Habit not found"

    assert client.get(f"/api/habits/{habit['id']}", headers=alice).json()["data"]["id"] == habit["id"]
    assert len(client.get("/api/habits", headers=alice).json()["data"]) == 1


def test_update_habit_partial(client, auth_headers):
    habit = create_habit(client, auth_headers, color="#FF0000")

    resp = client.put(f"/api/habits/{habit['id']}", json={"frequency": "weekly", "targetDays": [1, 3]},
                      headers=auth_headers)
    assert resp.status_code == 200
    updated = resp.json()["data"]
    assert updated["frequency"] == "weekly"
    assert updated["targetDays"] == [1, 3]
    assert updated["color"] == "#FF0000"
    assert updated["title"] == habit["title"]


def test_update_habit_rejects_weekly_without_target_days(client, auth_headers):
    habit = create_habit(client, auth_headers)
    resp = client.put(f"/api/habits/{habit['id']}", json={"frequency": "weekly", "targetDays": []},
                      headers=auth_headers)
    assert resp.status_code == 400


def test_update_unknown_habit_is_404(client, auth_headers):
    resp = client.put("/api/habits/missing", json={"title": "x"}, headers=auth_headers)
    assert resp.status_code == 404


def test_complete_is_idempotent(client, auth_headers):
    habit = create_habit(client, auth_headers)
    url = f"/api/habits/{habit['id']}/complete"

    first = client.patch(url, json={"date": "2024-01-01"}, headers=auth_headers).json()["data"]
    second = client.patch(url, json={"date": "2024-01-01"}, headers=auth_headers).json()["data"]

    assert first == second
    assert first["date"] == "2024-01-01"
    completions = client.get(f"/api/habits/{habit['id']}/completions",
                             params={"start": "2024-01-01", "end": "2024-01-01"},
                             headers=auth_headers).json()["data"]
    assert len(completions) == 1


def test_complete_requires_date(client, auth_headers):
    habit = create_habit(client, auth_headers)
    resp = client.patch(f"/api/habits/{habit['id']}/complete", json={}, headers=auth_headers)
    assert resp.status_code == 400


def test_complete_unknown_habit_is_404(client, auth_headers):
    resp = client.patch("/api/habits/missing/complete", json={"date": "2024-01-01"}, headers=auth_headers)
    assert resp.status_code == 404


def test_mark_incomplete(client, auth_headers):
    habit = create_habit(client, auth_headers)
    client.patch(f"/api/habits/{habit['id']}/complete", json={"date": "2024-01-01"}, headers=auth_headers)

    resp = client.delete(f"/api/habits/{habit['id']}/complete/2024-01-01", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = client.delete(f"/api/habits/{habit['id']}/complete/2024-01-01", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Completion not found"


def test_completions_range_inclusive(client, auth_headers):
    habit = create_habit(client, auth_headers)
    for day in ("2024-01-01", "2024-01-05", "2024-01-10", "2024-01-11"):
        client.patch(f"/api/habits/{habit['id']}/complete", json={"date": day}, headers=auth_headers)

    resp = client.get(f"/api/habits/{habit['id']}/completions",
                      params={"start": "2024-01-01", "end": "2024-01-10"}, headers=auth_headers)
    assert [c["date"] for c in resp.json()["data"]] == ["2024-01-01", "2024-01-05", "2024-01-10"]


def test_completions_range_validates_params(client, auth_headers):
    habit = create_habit(client, auth_headers)
    url = f"/api/habits/{habit['id']}/completions"

    assert client.get(url, params={"start": "2024-01-01"}, headers=auth_headers).status_code == 400
    assert client.get(url, params={"start": "2024-01-10", "end": "2024-01-01"},
                      headers=auth_headers).status_code == 400


def test_streak_endpoint(client, auth_headers):
    habit = create_habit(client, auth_headers)
    today = date.today()
    for offset in (2, 1, 0):
        day = (today - timedelta(days=offset)).isoformat()
        client.patch(f"/api/habits/{habit['id']}/complete", json={"date": day}, headers=auth_headers)

    resp = client.get(f"/api/habits/{habit['id']}/streak", headers=auth_headers)
    assert resp.json() == {"success": True, "data": {"streak": 3}}


def test_streak_of_unknown_habit_is_404(client, auth_headers):
    assert client.get("/api/habits/missing/streak", headers=auth_headers).status_code == 404


def test_habits_for_date(client, auth_headers):
    daily = create_habit(client, auth_headers, title="Stretch")
    weekly = create_habit(client, auth_headers, title="Gym", frequency="weekly", targetDays=[1, 3])
    client.patch(f"/api/habits/{daily['id']}/complete", json={"date": "2024-01-01"}, headers=auth_headers)

    monday = client.get("/api/habits/date/2024-01-01", headers=auth_headers).json()["data"]
    by_id = {h["id"]: h for h in monday}
    assert set(by_id) == {daily["id"], weekly["id"]}
    assert by_id[daily["id"]]["completed"] is True
    assert by_id[weekly["id"]]["completed"] is False
    assert isinstance(by_id[daily["id"]]["streak"], int)

    tuesday = client.get("/api/habits/date/2024-01-02", headers=auth_headers).json()["data"]
    assert [h["id"] for h in tuesday] == [daily["id"]]


def test_habits_for_date_rejects_bad_date(client, auth_headers):
    resp = client.get("/api/habits/date/2024-13-01", headers=auth_headers)
    assert resp.status_code == 400


def test_delete_habit_cascades(client, auth_headers):
    habit = create_habit(client, auth_headers)
    client.patch(f"/api/habits/{habit['id']}/complete", json={"date": "2024-01-01"}, headers=auth_headers)

    resp = client.delete(f"/api/habits/{habit['id']}", headers=auth_headers)
    assert resp.json() == {"success": True, "message": "Habit deleted successfully"}

    assert client.get(f"/api/habits/{habit['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/habits/{habit['id']}", headers=auth_headers).status_code == 404
