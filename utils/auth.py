"""Token issuing, request authentication and route authorization.

Usage on a view, outermost first::

    @bp.route("/things", methods=["POST"])
    @protect
    @check_permission("things", "create")
    def create_thing():
        ...

``protect`` resolves the bearer token to an active :class:`User` and stores it
on ``flask.g``; ``authorize`` and ``check_permission`` must run after it.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from functools import wraps
from typing import Callable, Iterator

from flask import current_app, g, request
from flask_jwt_extended import create_access_token, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt.exceptions import ExpiredSignatureError, PyJWTError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import Forbidden

from models import db
from models.role_permission import RolePermission
from models.user import User
from utils.errors import (
    AccountInactive,
    AccountSetupIncomplete,
    InvalidCredentials,
    ServerError,
    Unauthenticated,
)
from utils.passwords import PasswordCheckError, dummy_check


class Action(str, Enum):
    """CRUD actions a permission row can grant."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def column(self) -> str:
        return f"can_{self.value}"

    @classmethod
    def parse(cls, value: str) -> "Action | None":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None


@contextmanager
def database_errors(operation: str) -> Iterator[None]:
    """Turn SQLAlchemy failures into a logged, generic 500."""

    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Database error during %s", operation)
        raise ServerError() from exc


# --------------------------------------------------------------------------
# Token issuer
# --------------------------------------------------------------------------

def find_login_user(identifier: str) -> User | None:
    """Look the identifier up as username, then email, then display name."""

    lookups = (
        User.username == identifier,
        func.lower(User.email) == identifier.lower(),
        User.name == identifier,
    )
    for criterion in lookups:
        user = User.query.filter(criterion).order_by(User.id).first()
        if user is not None:
            return user
    return None


def authenticate(identifier: str, password: str) -> User:
    """Return the account matching the credentials or raise a 401/500 error."""

    with database_errors("login"):
        user = find_login_user(identifier)

    if user is None:
        dummy_check(password)
        current_app.logger.info("Login failed: no account for identifier")
        raise InvalidCredentials()

    if not user.is_active:
        current_app.logger.info("Login refused for inactive user %s", user.id)
        raise AccountInactive()

    if not user.password_hash:
        current_app.logger.warning("Login refused for user %s without a password", user.id)
        raise AccountSetupIncomplete()

    try:
        valid = user.check_password(password)
    except PasswordCheckError as exc:
        current_app.logger.exception("Password comparison failed for user %s", user.id)
        raise ServerError("Authentication error. Please try again.") from exc

    if not valid:
        current_app.logger.info("Login failed: wrong password for user %s", user.id)
        raise InvalidCredentials()

    with database_errors("login"):
        user.last_login = datetime.utcnow()
        db.session.commit()

    current_app.logger.info("Login succeeded for user %s", user.id)
    return user


def issue_token(user: User) -> str:
    """Sign a token carrying the user id and role name."""

    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role_name},
    )


# --------------------------------------------------------------------------
# Token verifier
# --------------------------------------------------------------------------

def _reject(reason: str, *args) -> Unauthenticated:
    current_app.logger.info("Unauthenticated request to %s: " + reason, request.path, *args)
    return Unauthenticated()


def resolve_request_user() -> User:
    """Verify the bearer token and load its active user, or raise 401."""

    try:
        verify_jwt_in_request()
    except NoAuthorizationError:
        raise _reject("missing bearer token")
    except ExpiredSignatureError:
        raise _reject("token expired")
    except (JWTExtendedException, PyJWTError) as exc:
        raise _reject("invalid token (%s)", type(exc).__name__)

    try:
        user_id = int(get_jwt_identity())
    except (TypeError, ValueError):
        raise _reject("token identity is not a user id")

    with database_errors("token verification"):
        user = User.query.filter_by(id=user_id).first()

    if user is None:
        raise _reject("user %s no longer exists", user_id)
    if not user.is_active:
        raise _reject("user %s is inactive", user_id)
    return user


def protect(view: Callable) -> Callable:
    """Require a valid bearer token for an active user."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        g.current_user = resolve_request_user()
        return view(*args, **kwargs)

    return wrapper


def current_user() -> User | None:
    return g.get("current_user")


# --------------------------------------------------------------------------
# Authorizers
# --------------------------------------------------------------------------

def _require_identity() -> User:
    user = current_user()
    if user is None:
        current_app.logger.error("Authorizer on %s ran without an authenticated user", request.path)
        raise Forbidden("Not authorized to access this route")
    return user


def authorize(*roles: str) -> Callable:
    """Allow only users whose role name is in ``roles``."""

    allowed = frozenset(roles)

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = _require_identity()
            if user.role_name not in allowed:
                current_app.logger.info(
                    "Role %s refused on %s", user.role_name, request.path
                )
                raise Forbidden(
                    f"User role {user.role_name} is not authorized to access "
                    f"this route {request.path}"
                )
            return view(*args, **kwargs)

        return wrapper

    return decorator


def has_permission(user: User, module: str, action: str) -> bool:
    """Whether the user's role grants ``action`` on ``module``; raises if no row exists."""

    with database_errors("permission check"):
        permission = RolePermission.query.filter_by(
            role_id=user.role_id, module=module
        ).first()

    if permission is None:
        raise Forbidden("No permission found for this module")

    parsed = Action.parse(action)
    if parsed is None:
        return False
    return bool(getattr(permission, parsed.column))


def check_permission(module: str, action: str) -> Callable:
    """Gate a view on the caller's role permission row for ``module``."""

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = _require_identity()
            if not has_permission(user, module, action):
                current_app.logger.info(
                    "Role %s lacks %s on %s", user.role_name, action, module
                )
                raise Forbidden(f"Not authorized to {action} in this module")
            return view(*args, **kwargs)

        return wrapper

    return decorator
