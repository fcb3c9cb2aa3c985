# app/api/v1/endpoints/matching.py
# Tutor ↔ course matching
#
# POST /matching/courses/{course_id}/apply    -- tutor applies to teach a course
# GET  /matching/applications                 -- admin: pending applicants per course
# POST /matching/courses/{course_id}/accept   -- admin: assign the tutor (first wins)
# POST /matching/courses/{course_id}/reject   -- admin: reject the tutor's application

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import require_admin, require_tutor
from app.db.session import get_db
from app.models.course import Course
from app.models.user import User
from app.schemas.matching import (
    ApplicationResponse,
    MatchDecision,
    MatchResultResponse,
    PendingApplicationsItem,
)
from app.services import matching_service

router = APIRouter()


def _result(course: Course) -> MatchResultResponse:
    return MatchResultResponse(
        course_id=course.id,
        course_title=course.title,
        instructor_id=course.instructor_id,
        is_published=course.is_published,
    )


@router.post(
    "/courses/{course_id}/apply",
    response_model=ApplicationResponse,
    summary="Apply to teach a course",
)
def apply_to_course(
    course_id: UUID,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    course, created = matching_service.apply(db, current_user, course_id)
    return ApplicationResponse(
        course_id=course.id,
        course_title=course.title,
        tutor_id=current_user.tutor_profile.id,
        already_applied=not created,
    )


@router.get(
    "/applications",
    response_model=List[PendingApplicationsItem],
    summary="Pending tutor applications (admin)",
)
def list_pending_applications(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return matching_service.list_pending_applications(db)


@router.post(
    "/courses/{course_id}/accept",
    response_model=MatchResultResponse,
    summary="Accept a tutor for a course",
)
def accept_application(
    course_id: UUID,
    payload: MatchDecision,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _result(matching_service.accept(db, course_id, payload.tutor_id))


@router.post(
    "/courses/{course_id}/reject",
    response_model=MatchResultResponse,
    summary="Reject a tutor's application",
)
def reject_application(
    course_id: UUID,
    payload: MatchDecision,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _result(matching_service.reject(db, course_id, payload.tutor_id))
