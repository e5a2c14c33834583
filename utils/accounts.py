"""Login accounts owned by teacher, student and parent profiles."""

from __future__ import annotations

from werkzeug.exceptions import InternalServerError

from models import Parent, Role, Student, Teacher, User, db

PROFILE_MODELS = {"teacher": Teacher, "student": Student, "parent": Parent}


def _username_from_email(email: str) -> str:
    base = email.split("@", 1)[0].strip().lower() or "user"
    candidate = base
    suffix = 1
    while User.query.filter_by(username=candidate).first() is not None:
        suffix += 1
        candidate = f"{base}{suffix}"
    return candidate


def get_role(name: str) -> Role:
    role = Role.by_name(name)
    if role is None:
        raise InternalServerError(f"Role '{name}' is not configured.")
    return role


def create_account(
    *,
    name: str,
    email: str,
    role_name: str,
    password: str,
    username: str | None = None,
    profile=None,
) -> User:
    """Add a new user to the session with a hashed password; caller commits."""

    user = User(
        name=name,
        email=email,
        username=username or _username_from_email(email),
        role=get_role(role_name),
    )
    if profile is not None:
        user.profile_id = profile.id
        user.profile_type = profile.profile_type
    user.set_password(password)
    db.session.add(user)
    return user


def create_profile_account(profile, password: str) -> User:
    """Create the login for a freshly flushed profile record."""

    return create_account(
        name=profile.full_name,
        email=profile.email,
        role_name=profile.role_name,
        password=password,
        profile=profile,
    )


def find_profile_account(profile) -> User | None:
    return User.query.filter_by(
        profile_id=profile.id, profile_type=profile.profile_type
    ).first()


def sync_profile_account(profile) -> None:
    """Copy the profile's name and email onto its account; the password is untouched."""

    user = find_profile_account(profile)
    if user is not None:
        user.name = profile.full_name
        user.email = profile.email


def delete_profile_account(profile) -> None:
    user = find_profile_account(profile)
    if user is not None:
        db.session.delete(user)


def load_profile(user: User):
    """Return the profile record a user is linked to, if any."""

    model = PROFILE_MODELS.get(user.profile_type or "")
    if model is None or user.profile_id is None:
        return None
    return db.session.get(model, user.profile_id)
