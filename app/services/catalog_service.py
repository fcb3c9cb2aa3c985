# app/services/catalog_service.py
# Catalog store: categories, courses, tutor profiles, availability
#
# Invariants kept here:
#   Course.is_published  ⇒ Course.instructor_id is set
#   TutorProfile.courses mirrors Course.instructor_id
#   prerequisites exist and never include the course itself

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, ValidationError
from app.core.logging import get_logger
from app.models.course import Category, Course, course_prerequisites
from app.models.office_hours import OfficeHourMessage
from app.models.resource import TutorResource
from app.models.review import Review
from app.models.tutor import AvailabilitySlot, TutorProfile, tutor_courses
from app.models.user import User
from app.services import matching_service
from app.services.cv_matching import CandidateCourse, CVMatcher

logger = get_logger("catalog")

MINUTES_PER_DAY = 24 * 60


# ── Categories ────────────────────────────────────────────────────────────────

def create_category(db: Session, name: str, description: Optional[str] = None) -> Category:
    if db.query(Category).filter(Category.name == name).first():
        raise ValidationError(f"Category '{name}' already exists.")
    category = Category(name=name, description=description)
    db.add(category)
    db.commit()
    logger.info(f"Category created: {name}")
    return category


def list_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.name.asc()).all()


# ── Courses ───────────────────────────────────────────────────────────────────

def _get_category(db: Session, category_id: Optional[UUID]) -> Optional[Category]:
    if category_id is None:
        return None
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFound("Category not found.")
    return category


def _get_prerequisites(
    db: Session, prerequisite_ids: List[UUID], course_id: Optional[UUID] = None
) -> List[Course]:
    ids = list(dict.fromkeys(prerequisite_ids or []))
    if course_id is not None and course_id in ids:
        raise ValidationError("A course cannot be its own prerequisite.")
    if not ids:
        return []
    found = db.query(Course).filter(Course.id.in_(ids)).all()
    missing = set(ids) - {c.id for c in found}
    if missing:
        raise NotFound(
            "Prerequisite course not found.",
            extra={"missing": sorted(str(m) for m in missing)},
        )
    return found


def get_course(db: Session, course_id: UUID) -> Course:
    return matching_service.get_course_or_404(db, course_id)


def list_courses(
    db: Session,
    published_only: bool = True,
    unassigned: Optional[bool] = None,
    category_id: Optional[UUID] = None,
) -> List[Course]:
    query = db.query(Course)
    if published_only:
        query = query.filter(Course.is_published == True)  # noqa: E712
    if unassigned is True:
        query = query.filter(Course.instructor_id.is_(None))
    elif unassigned is False:
        query = query.filter(Course.instructor_id.isnot(None))
    if category_id:
        query = query.filter(Course.category_id == category_id)
    return query.order_by(Course.created_at.desc()).all()


def create_course(db: Session, data: Dict[str, Any]) -> Course:
    category = _get_category(db, data.get("category_id"))
    instructor = None
    if data.get("instructor_id"):
        instructor = matching_service.get_tutor_or_404(db, data["instructor_id"])
    prerequisites = _get_prerequisites(db, data.get("prerequisite_ids") or [])

    course = Course(
        title=data["title"],
        description=data.get("description"),
        category=category,
        price=data.get("price", 0),
        level=data.get("level", "beginner"),
        max_students=data.get("max_students", 0),
        instructor_id=instructor.id if instructor else None,
        is_published=bool(data.get("is_published")) and instructor is not None,
        prerequisites=prerequisites,
    )
    db.add(course)
    db.flush()

    if instructor:
        instructor.courses.append(course)
    else:
        matching_service.push_course_match(db, course)

    db.commit()
    logger.info(f"Course created: {course.id} ({course.title}) instructor={course.instructor_id}")
    return course


def update_course(db: Session, course_id: UUID, data: Dict[str, Any]) -> Course:
    """
    Apply a partial update. Setting instructor_id here is the admin-initiated
    matching path: a single write, no application needed.
    """
    course = get_course(db, course_id)

    if "category_id" in data:
        course.category = _get_category(db, data["category_id"])
    if "prerequisite_ids" in data and data["prerequisite_ids"] is not None:
        course.prerequisites = _get_prerequisites(db, data["prerequisite_ids"], course.id)

    for field in ("title", "description", "price", "level", "max_students"):
        if field in data and data[field] is not None:
            setattr(course, field, data[field])

    if "instructor_id" in data and data["instructor_id"] != course.instructor_id:
        new_instructor = None
        if data["instructor_id"] is not None:
            new_instructor = matching_service.get_tutor_or_404(db, data["instructor_id"])

        if course.instructor_id is not None:
            old_instructor = db.query(TutorProfile).filter(
                TutorProfile.id == course.instructor_id
            ).first()
            if old_instructor and course in old_instructor.courses:
                old_instructor.courses.remove(course)

        was_unassigned = course.instructor_id is None
        course.instructor = new_instructor
        if new_instructor:
            if course not in new_instructor.courses:
                new_instructor.courses.append(course)
            if was_unassigned:
                course.is_published = True
            matching_service.retire_applications(db, course, new_instructor)
        else:
            course.is_published = False

    if data.get("is_published") is not None:
        course.is_published = data["is_published"] and course.instructor is not None

    db.commit()
    db.refresh(course)
    logger.info(f"Course updated: {course.id} instructor={course.instructor_id}")
    return course


def delete_course(db: Session, course_id: UUID) -> None:
    course = get_course(db, course_id)
    # Links where this course is someone else's prerequisite; its own
    # prerequisite rows go with the ORM delete below
    db.execute(
        course_prerequisites.delete().where(
            course_prerequisites.c.prerequisite_id == course.id
        )
    )
    db.execute(tutor_courses.delete().where(tutor_courses.c.course_id == course.id))
    for model in (TutorResource, OfficeHourMessage):
        db.query(model).filter(model.course_id == course.id).delete(synchronize_session=False)
    db.query(Review).filter(Review.course_id == course.id).update(
        {"course_id": None}, synchronize_session=False
    )
    db.delete(course)
    db.commit()
    logger.info(f"Course deleted: {course_id}")


# ── Tutors ────────────────────────────────────────────────────────────────────

def get_tutor(db: Session, tutor_id: UUID) -> TutorProfile:
    return matching_service.get_tutor_or_404(db, tutor_id)


def list_tutors(db: Session) -> List[TutorProfile]:
    return db.query(TutorProfile).join(User).order_by(User.full_name.asc()).all()


def upsert_tutor_profile(db: Session, user: User, data: Dict[str, Any]) -> TutorProfile:
    profile = user.tutor_profile
    if not profile:
        profile = TutorProfile(user_id=user.id)
        db.add(profile)

    for field in ("bio", "experience_years", "hourly_rate", "cv_reference"):
        if field in data and data[field] is not None:
            setattr(profile, field, data[field])

    db.commit()
    db.refresh(profile)
    return profile


def set_availability(db: Session, tutor: TutorProfile, slots: List[Dict[str, Any]]) -> TutorProfile:
    """Replace the tutor's availability. Windows are minutes from midnight."""
    for i, slot in enumerate(slots):
        start, end = slot["start_minute"], slot["end_minute"]
        if not (0 <= start < end <= MINUTES_PER_DAY):
            raise ValidationError(
                f"Slot {i + 1}: need 0 <= start_minute < end_minute <= {MINUTES_PER_DAY}.",
                extra={"slot": i, "start_minute": start, "end_minute": end},
            )

    ordered = sorted(slots, key=lambda s: (s["date"], s["start_minute"]))
    tutor.availability = [
        AvailabilitySlot(
            date=s["date"], start_minute=s["start_minute"], end_minute=s["end_minute"]
        )
        for s in ordered
    ]
    db.commit()
    db.refresh(tutor)
    return tutor


# ── CV suggestions ────────────────────────────────────────────────────────────

def suggest_courses(db: Session, matcher: CVMatcher, cv_text: str, limit: int = 5) -> List[Course]:
    """Course suggestions for a tutor's CV. Advisory only."""
    if not (cv_text or "").strip():
        raise ValidationError("CV text cannot be empty.")

    courses = db.query(Course).all()
    by_id = {str(c.id): c for c in courses}
    candidates = [
        CandidateCourse(
            id=str(c.id),
            title=c.title,
            category_name=c.category.name if c.category else "",
            description=c.description or "",
        )
        for c in courses
    ]
    suggested = matcher.suggest_courses(cv_text, candidates, limit=limit)
    return [by_id[course_id] for course_id in suggested if course_id in by_id]
