# app/api/v1/endpoints/enrollments.py
# GET   /enrollments/me              -- own enrollments
# GET   /enrollments/{id}            -- detail (owner or admin)
# PATCH /enrollments/{id}/progress   -- owner reports completed resources

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import require_login, require_student
from app.db.session import get_db
from app.models.enrollment import Enrollment
from app.models.user import User
from app.schemas.enrollment import EnrollmentResponse, ProgressUpdate
from app.services import enrollment_service

router = APIRouter()


def _to_response(e: Enrollment) -> EnrollmentResponse:
    return EnrollmentResponse(
        id=e.id,
        student_id=e.student_id,
        course_id=e.course_id,
        course_title=e.course.title if e.course else "",
        booking_id=e.booking_id,
        status=e.status,
        progress=e.progress,
        completed_resource_ids=e.completed_resource_ids or [],
        total_resources=e.total_resources or 0,
        assignment_id=e.assignment_id,
        started_at=e.started_at,
        completed_at=e.completed_at,
    )


@router.get("/me", response_model=List[EnrollmentResponse], summary="Own enrollments")
def list_my_enrollments(
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    return [_to_response(e) for e in enrollment_service.list_for_student(db, current_user)]


@router.get("/{enrollment_id}", response_model=EnrollmentResponse, summary="Enrollment detail")
def get_enrollment(
    enrollment_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    return _to_response(enrollment_service.get_for_user(db, current_user, enrollment_id))


@router.patch(
    "/{enrollment_id}/progress",
    response_model=EnrollmentResponse,
    summary="Update resource progress",
)
def update_progress(
    enrollment_id: UUID,
    payload: ProgressUpdate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    enrollment = enrollment_service.update_progress(
        db,
        current_user,
        enrollment_id,
        payload.completed_resource_ids,
    )
    return _to_response(enrollment)
