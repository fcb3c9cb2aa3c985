# app/api/v1/endpoints/resources.py
# Course resources shared by tutors
#
# POST /resources/                     -- instructor adds a link to a course
# GET  /resources/courses/{course_id}  -- resources of a course
# GET  /resources/tutors/{tutor_id}    -- a tutor's resources (?course_id=)

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.dependencies import require_login, require_tutor
from app.db.session import get_db
from app.models.resource import TutorResource
from app.models.user import User
from app.schemas.resource import ResourceCreate, ResourceResponse
from app.services import resource_service

router = APIRouter()


def _to_response(r: TutorResource) -> ResourceResponse:
    return ResourceResponse(
        id=r.id,
        tutor_id=r.tutor_id,
        course_id=r.course_id,
        title=r.title,
        kind=r.kind,
        url=r.url,
        created_at=r.created_at,
    )


@router.post("/", response_model=ResourceResponse, status_code=201, summary="Add a course resource")
def add_resource(
    payload: ResourceCreate,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    resource = resource_service.add_resource(
        db, current_user, payload.course_id, payload.title, payload.url, payload.kind
    )
    return _to_response(resource)


@router.get(
    "/courses/{course_id}",
    response_model=List[ResourceResponse],
    summary="Resources of a course",
)
def list_course_resources(
    course_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    return [_to_response(r) for r in resource_service.list_for_course(db, course_id)]


@router.get(
    "/tutors/{tutor_id}",
    response_model=List[ResourceResponse],
    summary="Resources shared by a tutor",
)
def list_tutor_resources(
    tutor_id: UUID,
    course_id: Optional[UUID] = Query(None),
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    return [_to_response(r) for r in resource_service.list_for_tutor(db, tutor_id, course_id)]
