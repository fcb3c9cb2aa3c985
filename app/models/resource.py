# app/models/resource.py
# Course material a tutor shares with enrolled students (links for now)
#
# Enrollment progress counts these per course: completing every resource
# of a course is worth the 70-point resource part.

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, utcnow


class TutorResource(Base):
    __tablename__ = "tutor_resources"
    __table_args__ = (
        Index("ix_tutor_resources_tutor_course", "tutor_id", "course_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id = Column(
        Uuid, ForeignKey("tutor_profiles.id", ondelete="CASCADE"), nullable=False
    )
    course_id = Column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title = Column(String(255), nullable=False)
    kind = Column(
        Enum("link", "file", name="resource_kind_enum"),
        nullable=False,
        default="link",
    )
    url = Column(String(2048), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    tutor = relationship("TutorProfile")
    course = relationship("Course")

    def __repr__(self) -> str:
        return f"<TutorResource course={self.course_id} title={self.title!r}>"
