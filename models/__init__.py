"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

# Import models to register them with SQLAlchemy metadata.
from .role import Role  # noqa: E402,F401
from .role_permission import RolePermission  # noqa: E402,F401
from .user import User  # noqa: E402,F401
from .teacher import Teacher  # noqa: E402,F401
from .student import Student  # noqa: E402,F401
from .parent import Parent  # noqa: E402,F401

__all__ = [
    "db",
    "Role",
    "RolePermission",
    "User",
    "Teacher",
    "Student",
    "Parent",
]
