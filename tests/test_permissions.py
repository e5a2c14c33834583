"""Tests for the per-role, per-module permission table."""

from __future__ import annotations

import pytest
from flask.testing import FlaskClient
from werkzeug.exceptions import Forbidden

from models import db
from models.role import Role
from models.role_permission import RolePermission
from models.user import User
from utils.auth import Action, has_permission


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _teacher_payload(email: str = "t1@school.edu") -> dict:
    return {"first_name": "Tea", "last_name": "Cher", "email": email}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("create", Action.CREATE),
        ("READ", Action.READ),
        (" update ", Action.UPDATE),
        ("delete", Action.DELETE),
        ("publish", None),
        ("", None),
    ],
)
def test_action_parse(raw, expected):
    assert Action.parse(raw) is expected


def test_action_maps_to_permission_column():
    assert [action.column for action in Action] == [
        "can_create",
        "can_read",
        "can_update",
        "can_delete",
    ]


def test_unknown_action_fails_closed(app):
    with app.app_context():
        admin = User.query.filter_by(username="admin").first()
        assert has_permission(admin, "teachers", "read") is True
        assert has_permission(admin, "teachers", "publish") is False


def test_missing_row_raises_forbidden(app):
    with app.app_context():
        admin = User.query.filter_by(username="admin").first()
        with pytest.raises(Forbidden):
            has_permission(admin, "payments", "read")


def test_teacher_may_read_but_not_create_teachers(client: FlaskClient, login, create_user):
    create_user("reader", "Reader1!", role="teacher")
    headers = _auth_headers(login("reader", "Reader1!"))

    listing = client.get("/api/teachers", headers=headers)
    assert listing.status_code == 200

    response = client.post("/api/teachers", json=_teacher_payload(), headers=headers)
    assert response.status_code == 403
    assert response.get_json()["message"] == "Not authorized to create in this module"


def test_role_without_row_gets_no_permission_message(client: FlaskClient, login, create_user):
    create_user("kid", "Kid12345!", role="student")
    headers = _auth_headers(login("kid", "Kid12345!"))

    response = client.get("/api/teachers", headers=headers)

    assert response.status_code == 403
    assert response.get_json()["message"] == "No permission found for this module"


def test_permission_check_requires_authentication(client: FlaskClient):
    response = client.get("/api/teachers")

    assert response.status_code == 401


def test_admin_grants_permission_through_roles_api(app, client: FlaskClient, admin_headers, login, create_user):
    create_user("promoted", "Promo123!", role="teacher")
    with app.app_context():
        teacher_role_id = Role.by_name("teacher").id

    response = client.put(
        f"/api/roles/{teacher_role_id}/permissions/teachers",
        json={"can_create": True},
        headers=admin_headers,
    )
    assert response.status_code == 200
    row = response.get_json()["data"]
    assert row["can_create"] is True
    assert row["can_read"] is True

    headers = _auth_headers(login("promoted", "Promo123!"))
    created = client.post("/api/teachers", json=_teacher_payload("t2@school.edu"), headers=headers)
    assert created.status_code == 201


def test_upsert_creates_new_row_with_only_given_flags(app, client: FlaskClient, admin_headers):
    with app.app_context():
        student_role_id = Role.by_name("student").id

    response = client.put(
        f"/api/roles/{student_role_id}/permissions/teachers",
        json={"can_read": "yes"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    row = response.get_json()["data"]
    assert row == {
        "id": row["id"],
        "role_id": student_role_id,
        "module": "teachers",
        "can_create": False,
        "can_read": True,
        "can_update": False,
        "can_delete": False,
    }


@pytest.mark.parametrize("payload", [{"can_read": "sometimes"}, {"other": True}])
def test_upsert_validation(app, client: FlaskClient, admin_headers, payload):
    with app.app_context():
        role_id = Role.by_name("parent").id

    response = client.put(
        f"/api/roles/{role_id}/permissions/teachers", json=payload, headers=admin_headers
    )

    assert response.status_code == 400


def test_list_permissions_for_role(app, client: FlaskClient, admin_headers):
    with app.app_context():
        role_id = Role.by_name("parent").id

    response = client.get(f"/api/roles/{role_id}/permissions", headers=admin_headers)

    assert response.status_code == 200
    modules = [row["module"] for row in response.get_json()["data"]]
    assert modules == ["parents", "students"]


def test_roles_api_is_admin_only(client: FlaskClient, login, create_user):
    create_user("nosy", "Nosy1234!", role="teacher")

    response = client.get("/api/roles", headers=_auth_headers(login("nosy", "Nosy1234!")))

    assert response.status_code == 403


def test_revoked_permission_applies_on_next_request(app, client: FlaskClient, login, create_user):
    create_user("revoked", "Revoke12!", role="teacher")
    headers = _auth_headers(login("revoked", "Revoke12!"))
    assert client.get("/api/teachers", headers=headers).status_code == 200

    with app.app_context():
        role_id = Role.by_name("teacher").id
        row = RolePermission.query.filter_by(role_id=role_id, module="teachers").first()
        row.can_read = False
        db.session.commit()

    response = client.get("/api/teachers", headers=headers)
    assert response.status_code == 403
    assert response.get_json()["message"] == "Not authorized to read in this module"


def test_seeded_modules_are_the_gated_ones(app, client: FlaskClient, admin_headers):
    with app.app_context():
        role_id = Role.by_name("admin").id

    response = client.get(f"/api/roles/{role_id}/permissions", headers=admin_headers)

    modules = sorted(row["module"] for row in response.get_json()["data"])
    assert modules == ["parents", "students", "teachers"]
