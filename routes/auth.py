"""Authentication blueprint: login, account self-service and admin account tools."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func
from werkzeug.exceptions import BadRequest, Conflict, NotFound, Unauthorized

from models import db
from models.role import ROLE_NAMES
from models.user import User
from utils.accounts import create_account, load_profile
from utils.auth import (
    authenticate,
    authorize,
    current_user,
    database_errors,
    issue_token,
    protect,
)
from utils.errors import ServerError
from utils.passwords import PasswordCheckError, generate_password
from utils.request_validation import parse_bool, parse_json_request

auth_bp = Blueprint("auth", __name__)


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def _get_user_or_404(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple:
    """Exchange a username (or email, or name) and password for a JWT."""
    payload = parse_json_request(request)
    identifier = str(payload.get("username") or payload.get("email") or "").strip()
    password = payload.get("password") or ""

    if not identifier or not password:
        raise BadRequest("Please provide username and password")

    user = authenticate(identifier, str(password))
    token = issue_token(user)
    return (
        jsonify({"success": True, "token": token, "user": user.to_dict()}),
        HTTPStatus.OK,
    )


@auth_bp.route("/register", methods=["POST"])
@protect
@authorize("admin")
def register() -> tuple:
    """Create a login account; a generated password is returned once if none is given."""
    payload = parse_json_request(request, required_keys=("name", "email", "role"))
    email = _normalize_email(payload.get("email"))
    username = (payload.get("username") or "").strip() or None
    role = str(payload.get("role")).strip().lower()
    password = payload.get("password") or None

    if role not in ROLE_NAMES:
        raise BadRequest("Role must be one of: {}.".format(", ".join(ROLE_NAMES)))

    with database_errors("registration"):
        if User.query.filter(func.lower(User.email) == email).first() is not None:
            raise Conflict("User already exists")
        if username and User.query.filter_by(username=username).first() is not None:
            raise Conflict("Username already taken")

        generated = password is None
        if generated:
            password = generate_password()

        user = create_account(
            name=str(payload["name"]).strip(),
            email=email,
            role_name=role,
            password=str(password),
            username=username,
        )
        db.session.commit()

    body = {"success": True, "data": user.to_dict()}
    if generated:
        body["password"] = password
    return jsonify(body), HTTPStatus.CREATED


@auth_bp.route("/me", methods=["GET"])
@protect
def me():
    """Return the caller's account and linked profile."""
    user = current_user()
    with database_errors("profile lookup"):
        profile = load_profile(user)
    return jsonify(
        {
            "success": True,
            "data": {
                "user": user.to_detail_dict(),
                "profile": profile.to_dict() if profile is not None else None,
            },
        }
    )


@auth_bp.route("/logout", methods=["GET"])
@protect
def logout():
    # Tokens are stateless; the client discards its copy.
    return jsonify({"success": True, "message": "User logged out successfully"})


@auth_bp.route("/updatepassword", methods=["PUT"])
@protect
def update_password():
    """Change the caller's password after confirming the current one."""
    payload = parse_json_request(request, required_keys=("currentPassword", "newPassword"))
    user = current_user()

    try:
        matches = user.check_password(str(payload["currentPassword"]))
    except PasswordCheckError as exc:
        current_app.logger.exception("Password comparison failed for user %s", user.id)
        raise ServerError("Authentication error. Please try again.") from exc
    if not matches:
        raise Unauthorized("Current password is incorrect")

    with database_errors("password update"):
        user.set_password(str(payload["newPassword"]))
        db.session.commit()

    current_app.logger.info("Password changed for user %s", user.id)
    return jsonify({"success": True, "token": issue_token(user), "user": user.to_dict()})


@auth_bp.route("/resetpassword/<int:user_id>", methods=["PUT"])
@protect
@authorize("admin")
def reset_password(user_id: int):
    """Give an account a fresh generated password, shown only in this response."""
    user = _get_user_or_404(user_id)
    password = generate_password()

    with database_errors("password reset"):
        user.set_password(password)
        db.session.commit()

    current_app.logger.info("Password reset for user %s by admin %s", user.id, current_user().id)
    return jsonify(
        {"success": True, "message": "Password reset successful", "password": password}
    )


@auth_bp.route("/users/<int:user_id>/status", methods=["PUT"])
@protect
@authorize("admin")
def set_user_status(user_id: int):
    """Activate or deactivate an account."""
    payload = parse_json_request(request)
    active = parse_bool(payload.get("active"))
    if active is None:
        raise BadRequest("active must be provided as a boolean value.")

    user = _get_user_or_404(user_id)
    with database_errors("status update"):
        user.is_active = active
        db.session.commit()

    return jsonify({"success": True, "data": user.to_dict()})
