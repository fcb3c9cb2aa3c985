# app/api/v1/endpoints/tutors.py
# Tutor profiles
#
# GET  /tutors/                  -- admin: all tutors
# GET  /tutors/me                -- own profile
# PUT  /tutors/me                -- update own profile
# PUT  /tutors/me/availability   -- replace own availability
# POST /tutors/me/suggest-courses -- course suggestions from CV text
# GET  /tutors/{id}              -- public profile

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.endpoints.courses import course_to_response
from app.core.dependencies import cv_matcher, require_admin, require_tutor
from app.db.session import get_db
from app.models.tutor import TutorProfile
from app.models.user import User
from app.schemas.course import CourseSuggestRequest, CourseSuggestResponse
from app.schemas.tutor import (
    AvailabilitySlotResponse,
    AvailabilityUpdate,
    TutorProfileUpdate,
    TutorResponse,
)
from app.services import catalog_service
from app.services.cv_matching import CVMatcher
from app.services.matching_service import tutor_for_user

router = APIRouter()


def _to_response(t: TutorProfile) -> TutorResponse:
    return TutorResponse(
        id=t.id,
        user_id=t.user_id,
        full_name=t.full_name,
        email=t.user.email if t.user else "",
        bio=t.bio,
        experience_years=t.experience_years or 0,
        hourly_rate=float(t.hourly_rate or 0),
        cv_reference=t.cv_reference,
        course_ids=[c.id for c in t.courses],
        availability=[
            AvailabilitySlotResponse(
                date=s.date, start_minute=s.start_minute, end_minute=s.end_minute
            )
            for s in t.availability
        ],
    )


@router.get("/", response_model=List[TutorResponse], summary="List tutors (admin)")
def list_tutors(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return [_to_response(t) for t in catalog_service.list_tutors(db)]


@router.get("/me", response_model=TutorResponse, summary="Own tutor profile")
def get_my_profile(current_user: User = Depends(require_tutor)):
    return _to_response(tutor_for_user(current_user))


@router.put("/me", response_model=TutorResponse, summary="Update own tutor profile")
def update_my_profile(
    payload: TutorProfileUpdate,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    profile = catalog_service.upsert_tutor_profile(db, current_user, payload.model_dump(exclude_unset=True))
    return _to_response(profile)


@router.put("/me/availability", response_model=TutorResponse, summary="Replace own availability")
def set_my_availability(
    payload: AvailabilityUpdate,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    tutor = tutor_for_user(current_user)
    tutor = catalog_service.set_availability(db, tutor, [s.model_dump() for s in payload.slots])
    return _to_response(tutor)


@router.post(
    "/me/suggest-courses",
    response_model=CourseSuggestResponse,
    summary="Suggest courses from CV text",
)
def suggest_courses(
    payload: CourseSuggestRequest,
    current_user: User = Depends(require_tutor),
    matcher: CVMatcher = Depends(cv_matcher),
    db: Session = Depends(get_db),
):
    courses = catalog_service.suggest_courses(db, matcher, payload.cv_text, payload.limit)
    return CourseSuggestResponse(
        course_ids=[c.id for c in courses],
        courses=[course_to_response(c) for c in courses],
    )


@router.get("/{tutor_id}", response_model=TutorResponse, summary="Tutor profile")
def get_tutor(tutor_id: UUID, db: Session = Depends(get_db)):
    return _to_response(catalog_service.get_tutor(db, tutor_id))
