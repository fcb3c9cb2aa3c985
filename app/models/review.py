# app/models/review.py
# Student reviews of tutors, one per (student, tutor, course)

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, utcnow


class Review(Base):
    """
    Re-reviewing the same tutor for the same course overwrites the rating
    and comment. course_id is optional; a NULL course is matched by the
    service, not by the unique constraint.
    """
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("reviewer_id", "tutor_id", "course_id", name="uq_review_per_course"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    reviewer_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tutor_id = Column(
        Uuid, ForeignKey("tutor_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Uuid, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True, index=True
    )

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    reviewer = relationship("User")
    tutor = relationship("TutorProfile")
    course = relationship("Course")

    def __repr__(self) -> str:
        return f"<Review tutor={self.tutor_id} rating={self.rating}>"
