"""User model definition."""

from datetime import datetime

from utils.passwords import check_password, hash_password

from . import db


PROFILE_TYPES = ("student", "teacher", "parent")


class User(db.Model):
    """A login account, optionally linked to a student, teacher or parent profile."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False)
    username = db.Column(db.String(120), unique=True, nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id"), nullable=False, index=True)
    is_active = db.Column(
        db.Boolean,
        nullable=False,
        default=True,
        server_default=db.text("1"),
    )
    profile_id = db.Column(db.Integer, nullable=True)
    profile_type = db.Column(db.String(16), nullable=True)
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    role = db.relationship("Role", back_populates="users", lazy="joined")

    __table_args__ = (
        db.Index("ix_users_profile", "profile_type", "profile_id"),
    )

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role is not None else None

    @property
    def status(self) -> str:
        return "active" if self.is_active else "inactive"

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password(password, self.password_hash)

    def to_dict(self) -> dict:
        """Public representation; never includes the password hash."""

        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "username": self.username,
            "role": self.role_name,
            "status": self.status,
        }

    def to_detail_dict(self) -> dict:
        data = self.to_dict()
        data.update(
            {
                "role_id": self.role_id,
                "profile_id": self.profile_id,
                "profile_type": self.profile_type,
                "last_login": self.last_login.isoformat() if self.last_login else None,
                "created_at": self.created_at.isoformat() if self.created_at else None,
            }
        )
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
