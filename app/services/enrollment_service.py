# app/services/enrollment_service.py
# Enrollment lookup and progress
#
# Progress = resources (up to 70) + graded assignment (30), half-up rounded.
# The resource total is the number of TutorResource rows for the course.
# Enrollments are created only by the booking payment flow (get_or_create).

from typing import List, Set
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.core.logging import get_logger
from app.db.base_class import utcnow
from app.models.assignment import Assignment
from app.models.booking import Booking
from app.models.enrollment import Enrollment
from app.models.resource import TutorResource
from app.models.user import User

logger = get_logger("enrollments")

RESOURCE_WEIGHT = 70
ASSIGNMENT_WEIGHT = 30


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half away from zero, for non-negative inputs."""
    return (2 * numerator + denominator) // (2 * denominator)


def compute_progress(done: int, total: int, assignment_graded: bool) -> int:
    # Work in units of 1/total to stay in integers
    total = max(total, 0)
    if total:
        resource_part = min(RESOURCE_WEIGHT * done, RESOURCE_WEIGHT * total)
        value = round_half_up(
            resource_part + (ASSIGNMENT_WEIGHT * total if assignment_graded else 0), total
        )
    else:
        value = ASSIGNMENT_WEIGHT if assignment_graded else 0
    return max(0, min(100, value))


def get_or_create_for_booking(db: Session, booking: Booking) -> Enrollment:
    """
    Idempotent by booking_id. The unique constraint on enrollments.booking_id
    settles a race between two callers.
    """
    enrollment = db.query(Enrollment).filter(Enrollment.booking_id == booking.id).first()
    if enrollment:
        return enrollment

    enrollment = Enrollment(
        student_id=booking.student_id,
        course_id=booking.course_id,
        booking_id=booking.id,
        status="active",
        progress=0,
        completed_resource_ids=[],
        total_resources=len(course_resource_ids(db, booking.course_id)),
    )
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        enrollment = db.query(Enrollment).filter(Enrollment.booking_id == booking.id).one()
        logger.warning(f"Enrollment for booking {booking.id} created concurrently; reusing it")
        return enrollment

    logger.info(f"Enrollment {enrollment.id} created for booking {booking.id}")
    return enrollment


def course_resource_ids(db: Session, course_id: UUID) -> Set[str]:
    return {
        str(row.id)
        for row in db.query(TutorResource.id).filter(TutorResource.course_id == course_id).all()
    }


def recompute_progress(db: Session, enrollment: Enrollment) -> Enrollment:
    """
    Resources are counted here, never taken from the caller. Completed ids
    that no longer belong to the course don't count. Not committed.
    """
    graded = db.query(Assignment.id).filter(
        Assignment.booking_id == enrollment.booking_id,
        Assignment.status == "graded",
    ).first() is not None

    resource_ids = course_resource_ids(db, enrollment.course_id)
    done = sum(1 for r in (enrollment.completed_resource_ids or []) if r in resource_ids)

    enrollment.total_resources = len(resource_ids)
    enrollment.progress = compute_progress(done, len(resource_ids), graded)
    if enrollment.progress >= 100 and enrollment.status == "active":
        enrollment.status = "completed"
        enrollment.completed_at = utcnow()
    return enrollment


def list_for_student(db: Session, student: User) -> List[Enrollment]:
    return db.query(Enrollment).filter(
        Enrollment.student_id == student.id
    ).order_by(Enrollment.started_at.desc()).all()


def get_for_user(db: Session, user: User, enrollment_id: UUID) -> Enrollment:
    enrollment = db.query(Enrollment).filter(Enrollment.id == enrollment_id).first()
    if not enrollment:
        raise NotFound("Enrollment not found.")
    if user.role != "admin" and enrollment.student_id != user.id:
        raise Forbidden("This enrollment belongs to another student.")
    return enrollment


def update_progress(
    db: Session,
    student: User,
    enrollment_id: UUID,
    completed_resource_ids: List[str],
) -> Enrollment:
    enrollment = get_for_user(db, student, enrollment_id)
    if enrollment.student_id != student.id:
        raise Forbidden("This enrollment belongs to another student.")

    unique_ids = list(dict.fromkeys(str(r) for r in completed_resource_ids))
    known = course_resource_ids(db, enrollment.course_id)
    unknown = [r for r in unique_ids if r not in known]
    if unknown:
        raise ValidationError(
            "Some resources do not belong to this course.", extra={"unknown": unknown}
        )

    enrollment.completed_resource_ids = unique_ids
    recompute_progress(db, enrollment)
    db.commit()
    logger.info(f"Enrollment {enrollment.id} progress={enrollment.progress}")
    return enrollment
