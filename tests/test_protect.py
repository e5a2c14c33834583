"""Tests for bearer token verification and role allow-lists."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt as pyjwt
import pytest
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token, decode_token
from werkzeug.exceptions import Forbidden

from models import db
from models.user import User
from utils.auth import authorize

GENERIC_MESSAGE = "Not authorized to access this route"


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _assert_unauthenticated(response) -> None:
    assert response.status_code == 401
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["message"] == GENERIC_MESSAGE


def test_missing_header_is_rejected(client: FlaskClient):
    _assert_unauthenticated(client.get("/api/auth/me"))


@pytest.mark.parametrize(
    "header",
    ["Bearer", "Bearer not.a.token", "Token abc", "Basic dXNlcjpwYXNz"],
)
def test_malformed_header_is_rejected(client: FlaskClient, header):
    _assert_unauthenticated(client.get("/api/auth/me", headers={"Authorization": header}))


def test_token_signed_with_another_secret_is_rejected(client: FlaskClient):
    forged = pyjwt.encode(
        {
            "id": "1",
            "role": "admin",
            "type": "access",
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        "some-other-secret",
        algorithm="HS256",
    )

    _assert_unauthenticated(client.get("/api/auth/me", headers=_auth_headers(forged)))


def test_expired_token_is_rejected(app, client: FlaskClient, create_user):
    user_id = create_user("expired", "Expired1!")
    with app.app_context():
        token = create_access_token(
            identity=str(user_id), expires_delta=timedelta(seconds=-5)
        )

    _assert_unauthenticated(client.get("/api/auth/me", headers=_auth_headers(token)))


def test_token_for_deactivated_user_is_rejected(app, client: FlaskClient, login, create_user):
    user_id = create_user("fading", "Fading1!")
    token = login("fading", "Fading1!")
    assert client.get("/api/auth/me", headers=_auth_headers(token)).status_code == 200

    with app.app_context():
        db.session.get(User, user_id).is_active = False
        db.session.commit()

    _assert_unauthenticated(client.get("/api/auth/me", headers=_auth_headers(token)))


def test_token_for_deleted_user_is_rejected(app, client: FlaskClient, login, create_user):
    user_id = create_user("ghost", "Ghost123!")
    token = login("ghost", "Ghost123!")

    with app.app_context():
        db.session.delete(db.session.get(User, user_id))
        db.session.commit()

    _assert_unauthenticated(client.get("/api/auth/me", headers=_auth_headers(token)))


def test_token_with_non_numeric_identity_is_rejected(app, client: FlaskClient):
    with app.app_context():
        token = create_access_token(identity="admin")

    _assert_unauthenticated(client.get("/api/auth/me", headers=_auth_headers(token)))


def test_issued_token_carries_id_and_role(app, login):
    token = login("admin", "admin123")

    with app.app_context():
        claims = decode_token(token)

    assert claims["role"] == "admin"
    assert int(claims["id"]) > 0
    assert claims["exp"] - claims["iat"] == int(timedelta(days=1).total_seconds())


def test_teacher_is_forbidden_on_admin_route(client: FlaskClient, login, create_user):
    create_user("plainteacher", "Teach123!", role="teacher")
    token = login("plainteacher", "Teach123!")

    response = client.put("/api/auth/resetpassword/1", headers=_auth_headers(token))

    assert response.status_code == 403
    payload = response.get_json()
    assert payload["success"] is False
    assert "teacher" in payload["message"]
    assert "/api/auth/resetpassword/1" in payload["message"]


def test_admin_passes_role_allow_list(client: FlaskClient, admin_headers):
    response = client.get("/api/roles", headers=admin_headers)

    assert response.status_code == 200
    names = {role["name"] for role in response.get_json()["data"]}
    assert names == {"admin", "teacher", "student", "parent"}


def test_authorizer_without_identity_is_forbidden(app):
    @authorize("admin")
    def view():
        return "ok"

    with app.test_request_context("/api/anything"):
        with pytest.raises(Forbidden):
            view()
