"""Application configuration module."""

import os
import re
from datetime import timedelta
from urllib.parse import quote_plus


_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([dhms]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {"d": "days", "h": "hours", "m": "minutes", "s": "seconds", "": "seconds"}


def parse_duration(value: str) -> timedelta:
    """Parse ``1d``, ``12h``, ``30m``, ``45s`` or a bare number of seconds."""

    match = _DURATION_PATTERN.match(value or "")
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})


def _build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    user = os.getenv("DB_USER")
    if not user:
        return "sqlite:///sms.db"

    password = quote_plus(os.getenv("DB_PASSWORD", ""))
    host = os.getenv("DB_HOST", "127.0.0.1")
    port = os.getenv("DB_PORT", "3306")
    name = os.getenv("DB_NAME", "sms_spi")
    return f"mysql+pymysql://{quote_plus(user)}:{password}@{host}:{port}/{name}"


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", "10")),
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", "280")),
        "pool_pre_ping": True,
    }


class Config:
    """Base configuration for the Flask application."""

    # Core
    API_PREFIX = os.getenv("API_PREFIX", "/api")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    SECRET_KEY = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET")
    JWT_ACCESS_TOKEN_EXPIRES = parse_duration(os.getenv("JWT_EXPIRE", "1d"))
    JWT_IDENTITY_CLAIM = "id"
    JWT_TOKEN_LOCATION = ["headers"]

    # Database
    SQLALCHEMY_DATABASE_URI = _build_database_url()
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Passwords
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))
    GENERATED_PASSWORD_LENGTH = int(os.getenv("GENERATED_PASSWORD_LENGTH", "8"))
    DEFAULT_PARENT_PASSWORD = os.getenv("DEFAULT_PARENT_PASSWORD", "spi123")

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]

    # Rate limiting
    RATE_LIMIT = os.getenv("RATE_LIMIT", "100 per 10 minutes")
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_KEY_PREFIX = os.getenv("RATELIMIT_KEY_PREFIX", "")
