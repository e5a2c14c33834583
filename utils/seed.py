"""Reference data: roles, the default permission matrix and the first admin."""

from __future__ import annotations

from models import db
from models.role import Role
from models.role_permission import RolePermission
from models.user import User

ROLE_DESCRIPTIONS = {
    "admin": "Full administrative access",
    "teacher": "Teaching staff",
    "student": "Enrolled student",
    "parent": "Parent or guardian of a student",
}

MODULES = ("teachers", "students", "parents")

ALL = ("create", "read", "update", "delete")

# role -> module -> granted actions
DEFAULT_PERMISSIONS = {
    "admin": {module: ALL for module in MODULES},
    "teacher": {"teachers": ("read",), "students": ("read",), "parents": ("read",)},
    "student": {"students": ("read",)},
    "parent": {"students": ("read",), "parents": ("read",)},
}


def seed_roles() -> dict[str, Role]:
    roles = {}
    for name, description in ROLE_DESCRIPTIONS.items():
        role = Role.by_name(name)
        if role is None:
            role = Role(name=name, description=description)
            db.session.add(role)
        roles[name] = role
    db.session.flush()
    return roles


def seed_permissions(roles: dict[str, Role]) -> None:
    """Create missing permission rows; existing rows keep their flags."""

    for role_name, modules in DEFAULT_PERMISSIONS.items():
        role = roles[role_name]
        for module, actions in modules.items():
            exists = RolePermission.query.filter_by(role_id=role.id, module=module).first()
            if exists is not None:
                continue
            db.session.add(
                RolePermission(
                    role_id=role.id,
                    module=module,
                    **{f"can_{action}": True for action in actions},
                )
            )


def seed_admin(username: str, password: str, email: str, name: str = "Administrator") -> tuple[User, str]:
    """Create or refresh the admin account; returns the user and what happened."""

    role = Role.by_name("admin")
    admin = User.query.filter_by(username=username).first()
    if admin is None:
        admin = User(name=name, email=email, username=username, role=role)
        db.session.add(admin)
        action = "created"
    else:
        admin.role = role
        action = "updated"
    admin.is_active = True
    admin.set_password(password)
    return admin, action


def seed_all(admin_username: str, admin_password: str, admin_email: str) -> tuple[User, str]:
    roles = seed_roles()
    seed_permissions(roles)
    result = seed_admin(admin_username, admin_password, admin_email)
    db.session.commit()
    return result
