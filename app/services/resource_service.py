# app/services/resource_service.py
# Tutor-shared course resources
#
# Only the course's current instructor can add a resource. Every add
# changes the denominator of enrollment progress, so the course's active
# enrollments are recomputed in the same commit.

from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import Forbidden, ValidationError
from app.core.logging import get_logger
from app.models.enrollment import Enrollment
from app.models.resource import TutorResource
from app.models.user import User
from app.services import enrollment_service
from app.services.matching_service import get_course_or_404, get_tutor_or_404, tutor_for_user

logger = get_logger("resources")


def add_resource(
    db: Session,
    user: User,
    course_id: UUID,
    title: str,
    url: str,
    kind: str = "link",
) -> TutorResource:
    tutor = tutor_for_user(user)
    course = get_course_or_404(db, course_id)
    if course.instructor_id != tutor.id:
        raise Forbidden("You can only add resources to courses you teach.")

    title, url = (title or "").strip(), (url or "").strip()
    if not title or not url:
        raise ValidationError("Title and URL are required.")

    resource = TutorResource(
        tutor_id=tutor.id,
        course_id=course.id,
        title=title,
        kind=kind,
        url=url,
    )
    db.add(resource)
    db.flush()

    active = db.query(Enrollment).filter(
        Enrollment.course_id == course.id, Enrollment.status == "active"
    ).all()
    for enrollment in active:
        enrollment_service.recompute_progress(db, enrollment)

    db.commit()
    logger.info(
        f"Resource {resource.id} added to course {course.id}; "
        f"{len(active)} enrollment(s) recomputed"
    )
    return resource


def list_for_course(db: Session, course_id: UUID) -> List[TutorResource]:
    get_course_or_404(db, course_id)
    return db.query(TutorResource).filter(
        TutorResource.course_id == course_id
    ).order_by(TutorResource.created_at.desc()).all()


def list_for_tutor(
    db: Session, tutor_id: UUID, course_id: Optional[UUID] = None
) -> List[TutorResource]:
    tutor = get_tutor_or_404(db, tutor_id)
    query = db.query(TutorResource).filter(TutorResource.tutor_id == tutor.id)
    if course_id:
        query = query.filter(TutorResource.course_id == course_id)
    return query.order_by(TutorResource.created_at.desc()).all()
