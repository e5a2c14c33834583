"""Parent profile model."""

from . import db
from .profile import ProfileMixin


class Parent(ProfileMixin, db.Model):
    __tablename__ = "parents"

    profile_type = "parent"
    role_name = "parent"

    relationship = db.Column(db.String(32), nullable=True)
    alternate_phone = db.Column(db.String(50), nullable=True)
    occupation = db.Column(db.String(120), nullable=True)

    students = db.relationship("Student", back_populates="parent")

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update(
            {
                "relationship": self.relationship,
                "alternate_phone": self.alternate_phone,
                "occupation": self.occupation,
            }
        )
        return data
