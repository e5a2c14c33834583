"""Teacher profile model."""

from . import db
from .profile import ProfileMixin


class Teacher(ProfileMixin, db.Model):
    __tablename__ = "teachers"

    profile_type = "teacher"
    role_name = "teacher"

    teacher_type = db.Column(db.String(32), nullable=True)
    position = db.Column(db.String(120), nullable=True)
    department_id = db.Column(db.Integer, nullable=True)
    hire_date = db.Column(db.Date, nullable=True)

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update(
            {
                "teacher_type": self.teacher_type,
                "position": self.position,
                "department_id": self.department_id,
                "hire_date": self.hire_date.isoformat() if self.hire_date else None,
            }
        )
        return data
