from __future__ import annotations

import os

# Must be set before quizhub.core.config builds its Settings instance
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ.pop("ADMIN_USERNAME", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizhub.core.security import create_access_token, get_password_hash
from quizhub.db.base import Base
from quizhub.db.session import get_db
from quizhub.models.user import User


@pytest.fixture()
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def client(session_factory):
    from quizhub.main import app

    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, username: str, *, full_name: str | None = None, role: str = "user", password: str = "secret1") -> User:
    u = User(
        full_name=full_name or username.title(),
        username=username,
        password_hash=get_password_hash(password),
        role=role,
        is_active=True,
        friends=[],
        friend_requests_sent=[],
        friend_requests_received=[],
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=str(user_id))}"}


def register(client: TestClient, username: str, password: str = "secret1", full_name: str | None = None) -> tuple[int, dict]:
    res = client.post(
        "/api/auth/register",
        json={"fullName": full_name or username.title(), "username": username, "password": password},
    )
    assert res.status_code == 201, res.text
    data = res.json()["data"]
    return int(data["user"]["id"]), {"Authorization": f"Bearer {data['token']['access_token']}"}
