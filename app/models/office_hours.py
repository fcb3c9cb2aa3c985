# app/models/office_hours.py
# Office-hour questions: a student asks during one of the tutor's
# availability windows, the tutor answers whenever

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, utcnow


class OfficeHourMessage(Base):
    __tablename__ = "office_hour_messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id = Column(
        Uuid, ForeignKey("tutor_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )

    message = Column(Text, nullable=False)
    reply = Column(Text, nullable=True)
    replied_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # ── Relationships ─────────────────────────────────────────────────────────
    tutor = relationship("TutorProfile")
    student = relationship("User")
    course = relationship("Course")

    def __repr__(self) -> str:
        return f"<OfficeHourMessage tutor={self.tutor_id} student={self.student_id}>"
