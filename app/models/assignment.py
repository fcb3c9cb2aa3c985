# app/models/assignment.py
# Graded quiz attempts tied to a confirmed booking
#
# Model reality:
#   - Every generation is a new attempt (attempt_number 1, 2, ...)
#   - questions hold the correct_index; it is stripped from student responses
#   - status only moves forward: created → submitted → graded

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, JSONType, utcnow


class Assignment(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("booking_id", "attempt_number", name="uq_assignment_attempt"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id = Column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tutor_id = Column(
        Uuid, ForeignKey("tutor_profiles.id", ondelete="SET NULL"), nullable=True
    )
    attempt_number = Column(Integer, nullable=False)

    # ── Quiz ──────────────────────────────────────────────────────────────────
    # [{"text": str, "type": "mcq"|"boolean", "options": [str], "correct_index": int}]
    questions = Column(JSONType, nullable=False, default=list)
    # Same length as questions, None for unanswered
    student_answers = Column(JSONType, nullable=True)

    status = Column(
        Enum("created", "submitted", "graded", name="assignment_status_enum"),
        nullable=False,
        default="created",
        index=True,
    )
    numeric_grade = Column(Integer, nullable=True)     # 0–100

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    graded_at = Column(DateTime(timezone=True), nullable=True)

    booking = relationship("Booking")
    course = relationship("Course")

    def __repr__(self) -> str:
        return (
            f"<Assignment booking={self.booking_id} attempt={self.attempt_number} "
            f"status={self.status}>"
        )
