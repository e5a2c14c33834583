"""Role model definition."""

from . import db


ROLE_NAMES = ("admin", "teacher", "student", "parent")


class Role(db.Model):
    """Static reference data naming what a user is."""

    __tablename__ = "roles"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(32), unique=True, nullable=False)
    description = db.Column(db.String(255), nullable=False, default="")

    users = db.relationship("User", back_populates="role")
    permissions = db.relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
    )

    @classmethod
    def by_name(cls, name: str) -> "Role | None":
        return cls.query.filter_by(name=name).first()

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Role {self.name}>"
