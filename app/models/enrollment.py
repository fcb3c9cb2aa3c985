# app/models/enrollment.py
# Student ↔ Course enrollment, created exactly once per paid booking

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, JSONType, utcnow


class Enrollment(Base):
    """
    Created by the booking payment flow, never by anything else.
    booking_id is UNIQUE -- the database is the last guard against a
    duplicate row when two payment requests race.
    """
    __tablename__ = "enrollments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    booking_id = Column(
        Uuid,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    status = Column(
        Enum("active", "completed", "dropped", name="enrollment_status_enum"),
        nullable=False,
        default="active",
    )

    # ── Progress ──────────────────────────────────────────────────────────────
    progress = Column(Integer, nullable=False, default=0)          # 0–100
    completed_resource_ids = Column(JSONType, nullable=False, default=list)
    total_resources = Column(Integer, nullable=False, default=0)

    # Latest assignment attempt for this enrollment
    assignment_id = Column(
        Uuid, ForeignKey("assignments.id", ondelete="SET NULL"), nullable=True
    )

    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # ── Relationships ─────────────────────────────────────────────────────────
    booking = relationship("Booking")
    course = relationship("Course")

    def __repr__(self) -> str:
        return f"<Enrollment booking={self.booking_id} progress={self.progress}>"
