"""Teacher, student and parent blueprints.

Each profile owns a login account: creating a profile creates the account and
returns its plaintext password exactly once; deleting the profile deletes the
account. Routes are gated by the role permission table.
"""

from __future__ import annotations

from datetime import date
from http import HTTPStatus
from typing import Callable

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func, or_
from werkzeug.exceptions import BadRequest, NotFound

from models import db
from models.parent import Parent
from models.profile import GENDERS, PROFILE_STATUSES
from models.student import Student
from models.teacher import Teacher
from models.user import User
from utils.accounts import create_profile_account, delete_profile_account, sync_profile_account
from utils.auth import check_permission, database_errors, protect
from utils.passwords import default_parent_password, generate_password
from utils.request_validation import parse_date, parse_json_request

REQUIRED_FIELDS = ("first_name", "last_name", "email")
COMMON_FIELDS = {
    "first_name": str,
    "last_name": str,
    "gender": str,
    "phone": str,
    "address": str,
}


def _parse_int(value, field: str) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise BadRequest(f"{field} must be an integer.") from exc


def _read_fields(payload: dict, fields: dict) -> dict:
    values = {}
    for field, kind in fields.items():
        if field not in payload:
            continue
        raw = payload[field]
        if kind is date:
            values[field] = parse_date(raw, field)
        elif kind is int:
            values[field] = _parse_int(raw, field)
        else:
            values[field] = str(raw).strip() if raw is not None else None

    gender = values.get("gender")
    if gender and gender.lower() not in GENDERS:
        raise BadRequest("gender must be one of: {}.".format(", ".join(GENDERS)))
    if gender:
        values["gender"] = gender.lower()
    return values


def _email_in_use(model, email: str, exclude_id: int | None = None) -> bool:
    query = model.query.filter(func.lower(model.email) == email)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return query.first() is not None


def _next_student_id_card(student: Student) -> str | None:
    """``YYYY-PP-MM-SSSS``: enrollment year, program, major and sequence."""

    if student.program_id is None or student.major_id is None:
        return None
    prefix = f"{date.today().year}-{student.program_id:02d}-{student.major_id:02d}-"
    last = (
        db.session.query(Student.student_id_card)
        .filter(Student.student_id_card.like(f"{prefix}%"))
        .order_by(Student.student_id_card.desc())
        .first()
    )
    sequence = int(last[0].rsplit("-", 1)[1]) if last is not None else 0
    return f"{prefix}{sequence + 1:04d}"


def _prepare_student(student: Student) -> None:
    if student.parent_id is not None and db.session.get(Parent, student.parent_id) is None:
        raise BadRequest("Referenced parent does not exist")
    if not student.student_id_card:
        student.student_id_card = _next_student_id_card(student)


def build_profile_blueprint(
    module: str,
    model,
    label: str,
    fields: dict,
    password_factory: Callable[[], str],
    prepare: Callable[[object], None] | None = None,
) -> Blueprint:
    """CRUD blueprint for one profile kind, gated on ``module`` permissions."""

    bp = Blueprint(module, __name__)
    all_fields = {**COMMON_FIELDS, **fields}

    def _get_or_404(profile_id: int):
        with database_errors(f"{module} lookup"):
            profile = db.session.get(model, profile_id)
        if profile is None:
            raise NotFound(f"{label} not found")
        return profile

    @bp.route("", methods=["GET"])
    @protect
    @check_permission(module, "read")
    def list_profiles():
        query = model.query
        search = (request.args.get("q") or "").strip().lower()
        if search:
            like = f"%{search}%"
            query = query.filter(
                or_(
                    func.lower(model.first_name).like(like),
                    func.lower(model.last_name).like(like),
                    func.lower(model.email).like(like),
                )
            )
        status = request.args.get("status")
        if status:
            query = query.filter(model.status == status)
        with database_errors(f"{module} listing"):
            records = query.order_by(model.id).all()
        return jsonify(
            {
                "success": True,
                "count": len(records),
                "data": [record.to_dict() for record in records],
            }
        )

    @bp.route("/<int:profile_id>", methods=["GET"])
    @protect
    @check_permission(module, "read")
    def get_profile(profile_id: int):
        return jsonify({"success": True, "data": _get_or_404(profile_id).to_dict()})

    @bp.route("", methods=["POST"])
    @protect
    @check_permission(module, "create")
    def create_profile():
        payload = parse_json_request(request, required_keys=REQUIRED_FIELDS)
        email = str(payload["email"]).strip().lower()
        values = _read_fields(payload, all_fields)

        with database_errors(f"{module} creation"):
            if _email_in_use(model, email):
                raise BadRequest(f"{label} with this email already exists")
            if _email_in_use(User, email):
                raise BadRequest("A user account with this email already exists")

            profile = model(email=email, status="active", **values)
            if prepare is not None:
                prepare(profile)
            db.session.add(profile)
            db.session.flush()

            password = password_factory()
            user = create_profile_account(profile, password)
            db.session.commit()

        current_app.logger.info("Created %s %s with user %s", module, profile.id, user.id)
        return (
            jsonify(
                {
                    "success": True,
                    "data": profile.to_dict(),
                    "user": {
                        "username": user.username,
                        "email": user.email,
                        "password": password,
                    },
                }
            ),
            HTTPStatus.CREATED,
        )

    @bp.route("/<int:profile_id>", methods=["PUT"])
    @protect
    @check_permission(module, "update")
    def update_profile(profile_id: int):
        profile = _get_or_404(profile_id)
        payload = parse_json_request(request)
        values = _read_fields(payload, all_fields)
        if "email" in payload:
            values["email"] = str(payload["email"] or "").strip().lower()
        blanked = [field for field in REQUIRED_FIELDS if field in values and not values[field]]
        if blanked:
            raise BadRequest("Fields cannot be empty: {}.".format(", ".join(blanked)))

        status = payload.get("status")
        if status is not None:
            if status not in PROFILE_STATUSES:
                raise BadRequest(
                    "status must be one of: {}.".format(", ".join(PROFILE_STATUSES))
                )
            values["status"] = status

        with database_errors(f"{module} update"):
            email = values.get("email")
            if email and email != profile.email:
                if _email_in_use(model, email, exclude_id=profile.id) or _email_in_use(User, email):
                    raise BadRequest("Email already in use")

            for field, value in values.items():
                setattr(profile, field, value)
            if prepare is not None:
                prepare(profile)
            sync_profile_account(profile)
            db.session.commit()

        return jsonify({"success": True, "data": profile.to_dict()})

    @bp.route("/<int:profile_id>", methods=["DELETE"])
    @protect
    @check_permission(module, "delete")
    def delete_profile(profile_id: int):
        profile = _get_or_404(profile_id)
        with database_errors(f"{module} deletion"):
            delete_profile_account(profile)
            db.session.delete(profile)
            db.session.commit()
        current_app.logger.info("Deleted %s %s and its account", module, profile_id)
        return jsonify({"success": True, "message": f"{label} deleted"})

    return bp


teachers_bp = build_profile_blueprint(
    "teachers",
    Teacher,
    "Teacher",
    {
        "teacher_type": str,
        "position": str,
        "department_id": int,
        "hire_date": date,
    },
    generate_password,
)

students_bp = build_profile_blueprint(
    "students",
    Student,
    "Student",
    {
        "date_of_birth": date,
        "program_id": int,
        "major_id": int,
        "parent_id": int,
    },
    generate_password,
    prepare=_prepare_student,
)

parents_bp = build_profile_blueprint(
    "parents",
    Parent,
    "Parent",
    {
        "relationship": str,
        "alternate_phone": str,
        "occupation": str,
    },
    default_parent_password,
)
