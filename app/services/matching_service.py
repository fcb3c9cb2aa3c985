# app/services/matching_service.py
# Tutor ↔ course matching workflow
#
# Flow:
#   1. Tutor applies            → tutor_application (per admin) + tutor_applied (tutor)
#   2. Admin accepts one tutor  → Course.instructor_id set by conditional write
#                                 winner: course_accepted, others: course_assigned_elsewhere,
#                                 admins: course_assigned_admin
#   3. Admin rejects a tutor    → pending applications dismissed, course_rejected
#
# Unassigned courses are pushed to tutors already teaching in the same
# category as course_match notifications; a tutor can apply straight from one.
#
# Pending application == tutor_application notification with action_status='none'.

from collections import OrderedDict
from typing import Dict, List, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import (
    AlreadyProcessed,
    CourseAlreadyAssigned,
    Forbidden,
    NotFound,
    ValidationError,
)
from app.core.logging import get_logger
from app.db.base_class import utcnow
from app.models.course import Course
from app.models.notification import Notification
from app.models.tutor import TutorProfile
from app.models.user import User
from app.services import notification_service
from app.services.notification_service import notify, set_action_status

logger = get_logger("matching")


# ── Lookups ───────────────────────────────────────────────────────────────────

def get_course_or_404(db: Session, course_id: UUID) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFound("Course not found.")
    return course


def get_tutor_or_404(db: Session, tutor_id: UUID) -> TutorProfile:
    tutor = db.query(TutorProfile).filter(TutorProfile.id == tutor_id).first()
    if not tutor:
        raise NotFound("Tutor not found.")
    return tutor


def tutor_for_user(user: User) -> TutorProfile:
    if not user.tutor_profile:
        raise NotFound("Tutor profile not found. Complete your profile first.")
    return user.tutor_profile


def _admins(db: Session) -> List[User]:
    return db.query(User).filter(
        User.role == "admin", User.is_active == True  # noqa: E712
    ).all()


def _payload(course: Course, tutor: TutorProfile = None) -> Dict:
    payload = {
        "course_id": str(course.id),
        "course_title": course.title,
        "category_name": course.category.name if course.category else None,
    }
    if tutor is not None:
        payload["tutor_id"] = str(tutor.id)
        payload["tutor_name"] = tutor.full_name
    return payload


def _pending_applications(course_id: UUID, tutor_id: UUID = None):
    criteria = [
        Notification.notification_type == "tutor_application",
        Notification.course_id == course_id,
    ]
    if tutor_id is not None:
        criteria.append(Notification.tutor_id == tutor_id)
    return criteria


# ── Apply ─────────────────────────────────────────────────────────────────────

def apply(db: Session, user: User, course_id: UUID) -> Tuple[Course, bool]:
    """
    Tutor applies to teach a course.
    Returns (course, created) -- created is False when an application is already pending.
    """
    tutor = tutor_for_user(user)
    course = get_course_or_404(db, course_id)

    if course.instructor_id == tutor.id:
        raise ValidationError("You already teach this course.")

    pending = db.query(Notification).filter(
        Notification.action_status == "none",
        *_pending_applications(course.id, tutor.id),
    ).first()
    if pending:
        return course, False

    payload = _payload(course, tutor)
    for admin in _admins(db):
        notify(
            db,
            user_id=admin.id,
            notification_type="tutor_application",
            title="New tutor application",
            message=f"{tutor.full_name} applied to teach {course.title}.",
            payload=payload,
        )

    notify(
        db,
        user_id=user.id,
        notification_type="tutor_applied",
        title="Application sent",
        message=f"Your application to teach {course.title} was sent to the admins.",
        payload=payload,
    )

    db.commit()
    logger.info(f"Tutor {tutor.id} applied to course {course.id}")
    return course, True


# ── Admin decisions ───────────────────────────────────────────────────────────

def accept(db: Session, course_id: UUID, tutor_id: UUID) -> Course:
    """
    Assign tutor_id as the course instructor if nobody holds it yet.
    Raises CourseAlreadyAssigned for the loser, after retiring its applications.
    """
    course = get_course_or_404(db, course_id)
    tutor = get_tutor_or_404(db, tutor_id)
    payload = _payload(course, tutor)

    won = db.query(Course).filter(
        Course.id == course.id, Course.instructor_id.is_(None)
    ).update(
        {"instructor_id": tutor.id, "is_published": True, "updated_at": utcnow()},
        synchronize_session=False,
    )
    db.refresh(course)

    if not won:
        set_action_status(db, "dismissed", *_pending_applications(course.id, tutor.id))
        if course.instructor_id != tutor.id:
            notify(
                db,
                user_id=tutor.user_id,
                notification_type="course_assigned_elsewhere",
                title="Course assigned to another tutor",
                message=f"{course.title} has already been assigned to another tutor.",
                payload=payload,
            )
        db.commit()
        logger.warning(
            f"Accept lost for course {course.id}: tutor {tutor.id}, "
            f"instructor is {course.instructor_id}"
        )
        raise CourseAlreadyAssigned(
            "This course already has an instructor.",
            extra={"course_id": str(course.id), "instructor_id": str(course.instructor_id)},
        )

    if course not in tutor.courses:
        tutor.courses.append(course)

    retire_applications(db, course, tutor)

    notify(
        db,
        user_id=tutor.user_id,
        notification_type="course_accepted",
        title="Application accepted",
        message=f"You are now the instructor for {course.title}.",
        payload=payload,
    )

    for admin in _admins(db):
        notify(
            db,
            user_id=admin.id,
            notification_type="course_assigned_admin",
            title="Instructor assigned",
            message=f"{tutor.full_name} now teaches {course.title}.",
            payload=payload,
        )

    db.commit()
    logger.info(f"Course {course.id} assigned to tutor {tutor.id}")
    return course


def retire_applications(db: Session, course: Course, winner: TutorProfile) -> int:
    """
    Close every pending application for a course that now has an instructor.
    The winner's own rows become applied; everyone else's are dismissed and
    those tutors hear course_assigned_elsewhere. Not committed.
    """
    # Other tutors still waiting on this course, before their rows are retired
    other_ids = {
        row.tutor_id
        for row in db.query(Notification.tutor_id).filter(
            Notification.action_status == "none",
            Notification.tutor_id != winner.id,
            *_pending_applications(course.id),
        ).all()
        if row.tutor_id is not None
    }

    set_action_status(db, "applied", *_pending_applications(course.id, winner.id))
    set_action_status(db, "dismissed", *_pending_applications(course.id))

    if other_ids:
        for other in db.query(TutorProfile).filter(TutorProfile.id.in_(other_ids)).all():
            notify(
                db,
                user_id=other.user_id,
                notification_type="course_assigned_elsewhere",
                title="Course assigned to another tutor",
                message=f"{course.title} has been assigned to another tutor.",
                payload=_payload(course, other),
            )
    return len(other_ids)


def reject(db: Session, course_id: UUID, tutor_id: UUID) -> Course:
    """Dismiss a tutor's pending applications. Never touches the instructor."""
    course = get_course_or_404(db, course_id)
    tutor = get_tutor_or_404(db, tutor_id)

    moved = set_action_status(db, "dismissed", *_pending_applications(course.id, tutor.id))
    if not moved:
        raise AlreadyProcessed("No pending application from this tutor for this course.")

    notify(
        db,
        user_id=tutor.user_id,
        notification_type="course_rejected",
        title="Application not accepted",
        message=f"Your application to teach {course.title} was not accepted.",
        payload=_payload(course, tutor),
    )
    db.commit()
    logger.info(f"Tutor {tutor.id} rejected for course {course.id}")
    return course


def list_pending_applications(db: Session) -> List[Dict]:
    """Courses with pending applicants, each applicant once, oldest application first."""
    rows = db.query(Notification).filter(
        Notification.notification_type == "tutor_application",
        Notification.action_status == "none",
    ).order_by(Notification.created_at.asc()).all()

    grouped: "OrderedDict[UUID, OrderedDict]" = OrderedDict()
    for n in rows:
        if n.course_id is None or n.tutor_id is None:
            continue
        applicants = grouped.setdefault(n.course_id, OrderedDict())
        if n.tutor_id not in applicants:
            applicants[n.tutor_id] = {
                "tutor_id": n.tutor_id,
                "tutor_name": (n.payload or {}).get("tutor_name", ""),
                "applied_at": n.created_at,
            }

    if not grouped:
        return []

    courses = {
        c.id: c for c in db.query(Course).filter(Course.id.in_(list(grouped.keys()))).all()
    }
    result = []
    for course_id, applicants in grouped.items():
        course = courses.get(course_id)
        if not course:
            continue
        result.append({
            "course_id": course.id,
            "course_title": course.title,
            "category_name": course.category.name if course.category else None,
            "assigned": course.instructor_id is not None,
            "applicants": list(applicants.values()),
        })
    return result


# ── Course-match push ─────────────────────────────────────────────────────────

def push_course_match(db: Session, course: Course) -> int:
    """
    Tell tutors who already teach in the course's category about a new
    unassigned course. Best effort: failures are logged, never raised.
    """
    if course.instructor_id is not None or course.category_id is None:
        return 0

    try:
        tutors = db.query(TutorProfile).filter(
            TutorProfile.courses.any(Course.category_id == course.category_id)
        ).all()
        for tutor in tutors:
            notify(
                db,
                user_id=tutor.user_id,
                notification_type="course_match",
                title="New course in your area",
                message=f"{course.title} needs an instructor. Apply if you'd like to teach it.",
                payload=_payload(course, tutor),
                dedupe=True,
            )
        return len(tutors)
    except Exception as e:
        logger.error(f"Course-match push failed for course {course.id}: {e}")
        return 0


def apply_from_notification(db: Session, user: User, notification_id: UUID) -> Tuple[Course, bool]:
    n = notification_service.get_for_user(db, user, notification_id)
    if n.notification_type != "course_match" or n.course_id is None:
        raise ValidationError("Only course match notifications can be applied from.")

    if not set_action_status(db, "applied", Notification.id == n.id):
        raise AlreadyProcessed("This notification has already been handled.")

    return apply(db, user, n.course_id)


# ── Notification decisions ────────────────────────────────────────────────────

DECISIONS = ("accept", "reject", "dismiss", "apply")


def resolve_notification(db: Session, user: User, notification_id: UUID, decision: str) -> Notification:
    """
    Act on a notification:
      tutor_application + accept|reject  → admin decision on the application
      course_match + apply               → tutor applies to the course
      any + dismiss                      → none → dismissed
    """
    if decision not in DECISIONS:
        raise ValidationError(f"Unknown decision '{decision}'.", extra={"allowed": list(DECISIONS)})

    n = notification_service.get_for_user(db, user, notification_id)
    if n.action_status != "none":
        raise AlreadyProcessed("This notification has already been handled.")

    if decision == "dismiss":
        if not set_action_status(db, "dismissed", Notification.id == n.id):
            raise AlreadyProcessed("This notification has already been handled.")
        db.commit()

    elif decision in ("accept", "reject"):
        if n.notification_type != "tutor_application":
            raise ValidationError("Only tutor applications can be accepted or rejected.")
        if user.role != "admin":
            raise Forbidden("Admin access required.")
        if decision == "accept":
            accept(db, n.course_id, n.tutor_id)
        else:
            reject(db, n.course_id, n.tutor_id)

    else:
        apply_from_notification(db, user, n.id)

    db.refresh(n)
    return n
