# app/models/tutor.py
# Tutor-specific data: profile, availability slots, linked courses

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, utcnow


# Courses a tutor is linked to. Kept in sync with Course.instructor_id by
# the catalog and matching services.
tutor_courses = Table(
    "tutor_courses",
    Base.metadata,
    Column(
        "tutor_id",
        Uuid,
        ForeignKey("tutor_profiles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "course_id",
        Uuid,
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class TutorProfile(Base):
    """
    Extended profile for users with role='tutor'.
    cv_reference is an opaque pointer to wherever the CV file lives.
    """
    __tablename__ = "tutor_profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    # ── Public Profile ────────────────────────────────────────────────────────
    bio = Column(Text, nullable=True)
    experience_years = Column(Integer, nullable=False, default=0)
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    cv_reference = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    user = relationship("User", back_populates="tutor_profile")
    courses = relationship("Course", secondary=tutor_courses)
    availability = relationship(
        "AvailabilitySlot",
        back_populates="tutor",
        cascade="all, delete-orphan",
        order_by=lambda: [AvailabilitySlot.date, AvailabilitySlot.start_minute],
    )

    @property
    def full_name(self) -> str:
        return self.user.full_name if self.user else ""

    def __repr__(self) -> str:
        return f"<TutorProfile user={self.user_id}>"


class AvailabilitySlot(Base):
    """One bookable window on a given date, in minutes from 00:00."""
    __tablename__ = "tutor_availability"
    __table_args__ = (
        CheckConstraint("start_minute < end_minute", name="ck_availability_window"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id = Column(
        Uuid,
        ForeignKey("tutor_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    start_minute = Column(Integer, nullable=False)
    end_minute = Column(Integer, nullable=False)

    tutor = relationship("TutorProfile", back_populates="availability")

    def __repr__(self) -> str:
        return f"<AvailabilitySlot {self.date} {self.start_minute}-{self.end_minute}>"
