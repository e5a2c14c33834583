"""Admin blueprint for roles and their per-module permission rows."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.role import Role
from models.role_permission import RolePermission
from utils.auth import Action, authorize, database_errors, protect
from utils.request_validation import parse_bool, parse_json_request

roles_bp = Blueprint("roles", __name__)


def _get_role_or_404(role_id: int) -> Role:
    role = db.session.get(Role, role_id)
    if role is None:
        raise NotFound("Role not found")
    return role


@roles_bp.route("", methods=["GET"])
@protect
@authorize("admin")
def list_roles():
    with database_errors("role listing"):
        roles = Role.query.order_by(Role.id).all()
    return jsonify({"success": True, "data": [role.to_dict() for role in roles]})


@roles_bp.route("/<int:role_id>/permissions", methods=["GET"])
@protect
@authorize("admin")
def list_permissions(role_id: int):
    role = _get_role_or_404(role_id)
    rows = sorted(role.permissions, key=lambda row: row.module)
    return jsonify(
        {"success": True, "role": role.to_dict(), "data": [row.to_dict() for row in rows]}
    )


@roles_bp.route("/<int:role_id>/permissions/<string:module>", methods=["PUT"])
@protect
@authorize("admin")
def upsert_permission(role_id: int, module: str):
    """Create or update the permission row for (role, module).

    Only the flags present in the body change; a new row starts with nothing
    granted.
    """
    role = _get_role_or_404(role_id)
    payload = parse_json_request(request)

    flags = {}
    for action in Action:
        if action.column not in payload:
            continue
        value = parse_bool(payload[action.column])
        if value is None:
            raise BadRequest(f"{action.column} must be a boolean value.")
        flags[action.column] = value
    if not flags:
        raise BadRequest(
            "Provide at least one of: {}.".format(", ".join(a.column for a in Action))
        )

    with database_errors("permission update"):
        row = RolePermission.query.filter_by(role_id=role.id, module=module).first()
        created = row is None
        if created:
            row = RolePermission(
                role_id=role.id,
                module=module,
                can_create=False,
                can_read=False,
                can_update=False,
                can_delete=False,
            )
            db.session.add(row)
        for column, value in flags.items():
            setattr(row, column, value)
        db.session.commit()

    return jsonify({"success": True, "data": row.to_dict()}), 201 if created else 200
