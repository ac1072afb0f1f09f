"""Registration, login and bearer token handling over HTTP."""

from datetime import timedelta

from jose import jwt
from sqlalchemy import event

from app.core import config
from app.core.security import issue_token
from app.db.session import get_engine


def test_register_returns_token_and_user(client):
    response = client.post("/api/auth/register", json={
        "username": "  alice ",
        "password": "secret123",
        "full_name": "Alice Liddell",
        "role": "user",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["username"] == "alice"
    assert data["user"]["full_name"] == "Alice Liddell"
    assert data["user"]["role"] == "user"
    assert "password" not in data["user"]


def test_duplicate_username_is_rejected(client, register):
    first = register("alice", full_name="First Alice")

    response = client.post("/api/auth/register", json={
        "username": "alice",
        "password": "another1",
        "full_name": "Second Alice",
        "role": "user",
    })

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Username already exists"
    assert body["errors"] == [{"field": "username", "message": "Username already exists"}]

    # the first account is untouched
    login = client.post("/api/auth/login", json={"username": "alice", "password": "secret123"})
    assert login.status_code == 200
    assert login.json()["user"]["id"] == first["user"]["id"]
    assert login.json()["user"]["full_name"] == "First Alice"


def test_register_validation_errors(client):
    response = client.post("/api/auth/register", json={
        "username": "al",
        "password": "123",
        "full_name": "   ",
        "role": "overlord",
    })

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"username", "password", "full_name", "role"}


def test_register_missing_fields(client):
    response = client.post("/api/auth/register", json={"username": "alice"})
    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert {"password", "full_name"} <= fields


def test_login(client, alice):
    response = client.post("/api/auth/login", json={"username": "alice", "password": "secret123"})
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == alice["user"]["id"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "alice"


def test_login_wrong_password(client, alice):
    response = client.post("/api/auth/login", json={"username": "alice", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_unknown_user(client):
    response = client.post("/api/auth/login", json={"username": "nobody", "password": "secret123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication required"
    assert response.headers["www-authenticate"] == "Bearer"


def test_me_with_invalid_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


def test_me_with_expired_token(client, alice):
    token = issue_token(alice["user"]["id"], "user", expires_delta=timedelta(seconds=-5))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token expired"


def test_me_with_malformed_claims(client, alice):
    token = jwt.encode({"sub": str(alice["user"]["id"])}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token format"


def test_token_for_unknown_user(client):
    token = issue_token(9999, "user")
    response = client.get("/api/posts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User not found"


def test_update_profile(client, alice):
    response = client.put("/api/users/profile", headers=alice["headers"], json={"full_name": "  Alice L. "})
    assert response.status_code == 200
    assert response.json()["full_name"] == "Alice L."
    assert response.json()["username"] == "alice"

    me = client.get("/api/auth/me", headers=alice["headers"])
    assert me.json()["full_name"] == "Alice L."


def test_update_profile_requires_full_name(client, alice):
    response = client.put("/api/users/profile", headers=alice["headers"], json={"full_name": ""})
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "full_name"


def test_update_profile_requires_auth(client):
    response = client.put("/api/users/profile", json={"full_name": "Someone"})
    assert response.status_code == 401


def test_token_with_out_of_range_subject(client):
    token = jwt.encode({"sub": "99999999999999999999", "role": "user"}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
    response = client.get("/api/posts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token format"


def test_register_requires_role(client):
    response = client.post("/api/auth/register", json={
        "username": "alice",
        "password": "secret123",
        "full_name": "Alice",
    })
    assert response.status_code == 400
    assert [error["field"] for error in response.json()["errors"]] == ["role"]


def test_me_loads_user_once(client, alice):
    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        if "FROM users" in statement:
            statements.append(statement)

    engine = get_engine()
    event.listen(engine, "before_cursor_execute", record)
    try:
        response = client.get("/api/auth/me", headers=alice["headers"])
    finally:
        event.remove(engine, "before_cursor_execute", record)

    assert response.status_code == 200
    assert len(statements) == 1
