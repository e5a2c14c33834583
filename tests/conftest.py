"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from utils.accounts import create_account  # noqa: E402
from utils.seed import seed_all  # noqa: E402

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


class _BaseTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_ROUNDS = 4
    RATE_LIMIT = "1000 per minute"


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application with seeded roles, permissions and admin."""

    application = create_app(_BaseTestConfig)

    with application.app_context():
        db.create_all()
        seed_all(ADMIN_USERNAME, ADMIN_PASSWORD, "admin@example.com")

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def create_user(app: Flask) -> Callable[..., int]:
    """Persist a user and return its id."""

    def _create(
        username: str,
        password: str | None = "Secret123!",
        role: str = "teacher",
        *,
        active: bool = True,
        email: str | None = None,
        name: str | None = None,
    ) -> int:
        with app.app_context():
            user = create_account(
                name=name or username.title(),
                email=email or f"{username}@example.com",
                role_name=role,
                password=password or "placeholder",
                username=username,
            )
            if password is None:
                user.password_hash = None
            user.is_active = active
            db.session.commit()
            return user.id

    return _create


@pytest.fixture()
def login(client: FlaskClient) -> Callable[[str, str], str]:
    """Log in through the API and return the bearer token."""

    def _login(username: str, password: str) -> str:
        response = client.post(
            "/api/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.get_json()
        return response.get_json()["token"]

    return _login


@pytest.fixture()
def admin_headers(login) -> dict[str, str]:
    return {"Authorization": f"Bearer {login(ADMIN_USERNAME, ADMIN_PASSWORD)}"}
