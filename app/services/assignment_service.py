# app/services/assignment_service.py
# Quiz assignments for confirmed bookings
#
# Create:
#   1. Booking must be confirmed
#   2. An ungraded attempt already exists → return it (already_exists=True)
#   3. Generate questions (nothing is written if this fails)
#   4. Bump Booking.assignment_attempts n → n+1 conditionally; the loser of
#      a race returns the winner's attempt
#   5. Insert attempt n+1 and point the enrollment at it
#
# Submit:
#   created → graded, once, by conditional write. Retakes are new attempts;
#   earlier attempts are never modified.

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AlreadyGraded,
    AlreadyProcessed,
    Forbidden,
    InvalidTransition,
    NotFound,
)
from app.core.logging import get_logger
from app.db.base_class import utcnow
from app.models.assignment import Assignment
from app.models.booking import Booking
from app.models.enrollment import Enrollment
from app.models.user import User
from app.services import enrollment_service
from app.services.booking_service import get_booking_or_404
from app.services.enrollment_service import round_half_up
from app.services.question_generator import CourseContext, QuestionGenerator

logger = get_logger("assignments")

PASS_MARK = 70
BELOW_PASSING_MARK = 50


# ── Grading ───────────────────────────────────────────────────────────────────

def classify(grade: int) -> str:
    if grade >= PASS_MARK:
        return "pass"
    if grade >= BELOW_PASSING_MARK:
        return "below_passing"
    return "fail"


def normalize_answers(answers: List[Any], question_count: int) -> List[Optional[int]]:
    """Trim or pad to question_count; anything that isn't an int becomes None."""
    normalized = []
    for value in list(answers or [])[:question_count]:
        if isinstance(value, int) and not isinstance(value, bool):
            normalized.append(value)
        else:
            normalized.append(None)
    normalized.extend([None] * (question_count - len(normalized)))
    return normalized


def grade_answers(questions: List[Dict], answers: List[Optional[int]]) -> Tuple[int, int, int]:
    """Returns (numeric_grade, correct, total). Grade is 100 * correct / total, half-up."""
    total = len(questions)
    correct = sum(
        1 for q, a in zip(questions, answers)
        if a is not None and a == q.get("correct_index")
    )
    if not total:
        return 0, 0, 0
    return round_half_up(100 * correct, total), correct, total


# ── Access ────────────────────────────────────────────────────────────────────

def _is_booking_tutor(user: User, booking: Booking) -> bool:
    return (
        user.role == "tutor"
        and user.tutor_profile is not None
        and user.tutor_profile.id == booking.tutor_id
    )


def _require_party(user: User, booking: Booking) -> None:
    if user.role == "admin" or booking.student_id == user.id or _is_booking_tutor(user, booking):
        return
    raise Forbidden("You are not part of this booking.")


def can_see_answers(user: User, booking: Booking) -> bool:
    return user.role == "admin" or _is_booking_tutor(user, booking)


def _latest_ungraded(db: Session, booking_id: UUID) -> Optional[Assignment]:
    return db.query(Assignment).filter(
        Assignment.booking_id == booking_id,
        Assignment.status != "graded",
    ).order_by(Assignment.attempt_number.desc()).first()


# ── Operations ────────────────────────────────────────────────────────────────

def create_assignment(
    db: Session,
    user: User,
    booking_id: UUID,
    generator: QuestionGenerator,
) -> Tuple[Assignment, bool]:
    """Returns (assignment, already_exists)."""
    booking = get_booking_or_404(db, booking_id)
    _require_party(user, booking)
    if booking.status != "confirmed":
        raise InvalidTransition("booking", booking.status, "create an assignment for")

    existing = _latest_ungraded(db, booking.id)
    if existing:
        return existing, True

    attempts = booking.assignment_attempts or 0
    course = booking.course
    context = CourseContext(
        course_id=str(course.id),
        title=course.title,
        description=course.description or "",
        level=course.level,
        category_name=course.category.name if course.category else "",
        attempt_number=attempts + 1,
        question_count=settings.quiz_question_count,
    )
    # Raises GenerationFailed; nothing has been written yet
    questions = generator.generate(context)

    won = db.query(Booking).filter(
        Booking.id == booking.id,
        Booking.assignment_attempts == attempts,
    ).update(
        {"assignment_attempts": attempts + 1, "updated_at": utcnow()},
        synchronize_session=False,
    )
    if not won:
        db.rollback()
        winner = _latest_ungraded(db, booking.id)
        logger.warning(f"Assignment create lost the race for booking {booking.id}")
        if not winner:
            raise AlreadyProcessed("Another assignment attempt was just created. Refresh and retry.")
        return winner, True

    assignment = Assignment(
        booking_id=booking.id,
        course_id=booking.course_id,
        student_id=booking.student_id,
        tutor_id=booking.tutor_id,
        attempt_number=attempts + 1,
        questions=questions,
        student_answers=None,
        status="created",
    )
    db.add(assignment)
    db.flush()

    enrollment = db.query(Enrollment).filter(Enrollment.booking_id == booking.id).first()
    if enrollment:
        enrollment.assignment_id = assignment.id

    db.commit()
    db.refresh(booking)
    logger.info(f"Assignment attempt {assignment.attempt_number} created for booking {booking.id}")
    return assignment, False


def submit_assignment(
    db: Session,
    student: User,
    assignment_id: UUID,
    answers: List[Any],
) -> Dict[str, Any]:
    assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not assignment:
        raise NotFound("Assignment not found.")
    if assignment.student_id != student.id:
        raise Forbidden("This assignment belongs to another student.")
    if assignment.status != "created":
        raise AlreadyGraded("This assignment has already been submitted.")

    questions = assignment.questions or []
    normalized = normalize_answers(answers, len(questions))
    grade, correct, total = grade_answers(questions, normalized)

    moved = db.query(Assignment).filter(
        Assignment.id == assignment.id,
        Assignment.status == "created",
    ).update(
        {
            "status": "graded",
            "student_answers": normalized,
            "numeric_grade": grade,
            "graded_at": utcnow(),
        },
        synchronize_session=False,
    )
    if not moved:
        db.rollback()
        raise AlreadyGraded("This assignment has already been submitted.")
    db.refresh(assignment)

    enrollment = db.query(Enrollment).filter(
        Enrollment.booking_id == assignment.booking_id
    ).first()
    if enrollment:
        enrollment_service.recompute_progress(db, enrollment)

    db.commit()
    classification = classify(grade)
    logger.info(
        f"Assignment {assignment.id} graded {grade} ({classification}) "
        f"attempt={assignment.attempt_number}"
    )
    return {
        "assignment": assignment,
        "numeric_grade": grade,
        "correct": correct,
        "total": total,
        "classification": classification,
        "enrollment_progress": enrollment.progress if enrollment else None,
    }


def get_assignment(db: Session, user: User, assignment_id: UUID) -> Tuple[Assignment, bool]:
    """Returns (assignment, include_answers)."""
    assignment = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not assignment:
        raise NotFound("Assignment not found.")
    booking = get_booking_or_404(db, assignment.booking_id)
    _require_party(user, booking)
    return assignment, can_see_answers(user, booking)


def list_attempts(db: Session, user: User, booking_id: UUID) -> Tuple[List[Assignment], bool]:
    booking = get_booking_or_404(db, booking_id)
    _require_party(user, booking)
    attempts = db.query(Assignment).filter(
        Assignment.booking_id == booking.id
    ).order_by(Assignment.attempt_number.asc()).all()
    return attempts, can_see_answers(user, booking)
