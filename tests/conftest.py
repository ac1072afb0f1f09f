import os

os.environ.setdefault("JWT_SECRET", "test-secret-key-for-the-timeline-suite")

from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core import config
from app.db.init_db import init_db
from app.db.session import SessionLocal, dispose_engine
from main import app


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Fresh SQLite file per test."""
    monkeypatch.setattr(config, "DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    dispose_engine()
    init_db()
    yield
    dispose_engine()


@pytest.fixture()
def client(database) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db(database) -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def register(client: TestClient) -> Callable[..., dict]:
    """Register a user through the API and return ``{"token", "user", "headers"}``."""

    def _register(username: str, role: str = "user", password: str = "secret123", full_name: str = None) -> dict:
        response = client.post("/api/auth/register", json={
            "username": username,
            "password": password,
            "full_name": full_name or username.title(),
            "role": role,
        })
        assert response.status_code == 201, response.text
        data = response.json()
        return {
            "token": data["access_token"],
            "user": data["user"],
            "headers": {"Authorization": f"Bearer {data['access_token']}"},
        }

    return _register


@pytest.fixture()
def alice(register) -> dict:
    return register("alice")


@pytest.fixture()
def bob(register) -> dict:
    return register("bob")


@pytest.fixture()
def admin(register) -> dict:
    return register("moderator", role="admin")


@pytest.fixture()
def make_post(client: TestClient) -> Callable[[dict, str], dict]:
    def _make_post(author: dict, content: str) -> dict:
        response = client.post("/api/posts", headers=author["headers"], json={"content": content})
        assert response.status_code == 201, response.text
        return response.json()

    return _make_post
