"""Registration, login and token handling."""
from datetime import datetime, timedelta, timezone

from jose import jwt

from daybook.config import settings


def test_register_returns_user_and_token(client):
    resp = client.post("/api/auth/register", json={"email": "Alice@Example.com", "password": "secret123"})

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["user"]["email"] == "alice@example.com"
    assert "passwordHash" not in data["user"]
    assert data["token"]


def test_register_rejects_duplicate_email(client, register):
    register("alice@example.com")
    resp = client.post("/api/auth/register", json={"email": "ALICE@example.com", "password": "secret123"})
    assert resp.status_code == 409
    assert resp.json()["success"] is False


def test_register_validates_input(client):
    assert client.post("/api/auth/register",
                       json={"email": "not-an-email", "password": "secret123"}).status_code == 400
    assert client.post("/api/auth/register",
                       json={"email": "bob@example.com", "password": "123"}).status_code == 400


def test_login_and_me(client, register):
    register("alice@example.com", "secret123")

    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()["data"]
    assert me["email"] == "alice@example.com"
    assert me["userId"] == resp.json()["data"]["user"]["id"]


def test_login_with_wrong_password(client, register):
    register("alice@example.com", "secret123")
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Invalid email or password"}


def test_login_with_unknown_email(client):
    resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
    assert resp.status_code == 401


def test_expired_token_is_rejected(client, register):
    register("alice@example.com")
    user_id = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"}
                          ).json()["data"]["user"]["id"]
    expired = jwt.encode(
        {"sub": user_id, "email": "alice@example.com",
         "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.SECRET_KEY, algorithm=settings.ALGORITHM,
    )
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid or expired token"


def test_token_for_unknown_user_is_rejected(client):
    token = jwt.encode({"sub": "nobody", "email": "x@example.com"},
                       settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    assert client.get("/api/habits", headers={"Authorization": f"Bearer {token}"}).status_code == 401


def test_health_check(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_unknown_route_uses_error_envelope(client):
    resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json()["success"] is False
