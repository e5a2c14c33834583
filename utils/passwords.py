"""Password hashing, comparison and generation helpers built on bcrypt."""

from __future__ import annotations

import secrets
import string

import bcrypt
from flask import current_app, has_app_context
from werkzeug.exceptions import BadRequest

DEFAULT_ROUNDS = 10
DEFAULT_GENERATED_LENGTH = 8
DEFAULT_PARENT_PASSWORD = "spi123"
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*()"

# bcrypt only reads the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72

# rounds -> hash compared against when no account matches
_dummy_hashes: dict[int, bytes] = {}


class PasswordCheckError(Exception):
    """Raised when a stored hash cannot be compared (corrupt or not bcrypt)."""


def _config(key: str, default):
    if has_app_context():
        return current_app.config.get(key, default)
    return default


def _rounds() -> int:
    return int(_config("BCRYPT_ROUNDS", DEFAULT_ROUNDS))


def _dummy_hash() -> bytes:
    rounds = _rounds()
    if rounds not in _dummy_hashes:
        _dummy_hashes[rounds] = bcrypt.hashpw(b"placeholder", bcrypt.gensalt(rounds=rounds))
    return _dummy_hashes[rounds]


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""

    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise BadRequest(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=_rounds()))
    return hashed.decode("utf-8")


def check_password(password: str, password_hash: str | None) -> bool:
    """Constant-time comparison of ``password`` against a bcrypt hash.

    Passwords longer than bcrypt accepts never match, but still cost one
    comparison.
    """

    if not password_hash:
        return False
    encoded = password.encode("utf-8")
    try:
        matched = bcrypt.checkpw(encoded[:MAX_PASSWORD_BYTES], password_hash.encode("utf-8"))
    except ValueError as exc:
        raise PasswordCheckError("Stored password hash is not a valid bcrypt hash.") from exc
    return matched and len(encoded) <= MAX_PASSWORD_BYTES


def dummy_check(password: str) -> None:
    """Spend one bcrypt comparison, at the configured cost, without a real account."""

    bcrypt.checkpw(password.encode("utf-8")[:MAX_PASSWORD_BYTES], _dummy_hash())


def generate_password(length: int | None = None) -> str:
    """Random printable password for auto-created accounts."""

    if length is None:
        length = int(_config("GENERATED_PASSWORD_LENGTH", DEFAULT_GENERATED_LENGTH))
    if length < 1:
        raise ValueError("Password length must be positive.")
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def default_parent_password() -> str:
    return _config("DEFAULT_PARENT_PASSWORD", DEFAULT_PARENT_PASSWORD)
