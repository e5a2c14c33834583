"""Student profile model."""

from . import db
from .profile import ProfileMixin


class Student(ProfileMixin, db.Model):
    __tablename__ = "students"

    profile_type = "student"
    role_name = "student"

    student_id_card = db.Column(db.String(32), unique=True, nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    program_id = db.Column(db.Integer, nullable=True)
    major_id = db.Column(db.Integer, nullable=True)
    parent_id = db.Column(
        db.Integer,
        db.ForeignKey("parents.id", ondelete="SET NULL"),
        nullable=True,
    )

    parent = db.relationship("Parent", back_populates="students")

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update(
            {
                "student_id_card": self.student_id_card,
                "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
                "program_id": self.program_id,
                "major_id": self.major_id,
                "parent_id": self.parent_id,
            }
        )
        return data
