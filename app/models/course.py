# app/models/course.py
# Catalog: categories and courses
#
# Course.instructor_id is the single authoritative instructor reference.
# It is written by the admin (create/update) or by the matching workflow's
# conditional accept -- never by anything else.
# is_published implies instructor_id is set; app/services/catalog_service.py
# keeps the two in step.

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Boolean,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, utcnow


# Self-referential prerequisite links (acyclicity is not enforced)
course_prerequisites = Table(
    "course_prerequisites",
    Base.metadata,
    Column(
        "course_id",
        Uuid,
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "prerequisite_id",
        Uuid,
        ForeignKey("courses.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    courses = relationship("Course", back_populates="category")

    def __repr__(self) -> str:
        return f"<Category name={self.name}>"


class Course(Base):
    __tablename__ = "courses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(160), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(
        Uuid,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ── Commercials ───────────────────────────────────────────────────────────
    price = Column(Numeric(10, 2), nullable=False, default=0)
    level = Column(
        Enum("beginner", "intermediate", "advanced", name="course_level_enum"),
        nullable=False,
        default="beginner",
    )
    max_students = Column(Integer, nullable=False, default=0)   # 0 = unlimited

    # ── Instructor ────────────────────────────────────────────────────────────
    instructor_id = Column(
        Uuid,
        ForeignKey("tutor_profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_published = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    category = relationship("Category", back_populates="courses")
    instructor = relationship("TutorProfile", foreign_keys=[instructor_id])
    prerequisites = relationship(
        "Course",
        secondary=course_prerequisites,
        primaryjoin=id == course_prerequisites.c.course_id,
        secondaryjoin=id == course_prerequisites.c.prerequisite_id,
    )

    def __repr__(self) -> str:
        return f"<Course title={self.title} instructor={self.instructor_id}>"
