# app/api/v1/endpoints/reviews.py
# Tutor reviews
#
# POST /reviews/tutors/{tutor_id}   -- student rates a tutor (re-submitting overwrites)
# GET  /reviews/tutors/me           -- tutor: own reviews
# GET  /reviews/tutors/{tutor_id}   -- a tutor's reviews with the average rating

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import require_student, require_tutor
from app.db.session import get_db
from app.models.review import Review
from app.models.tutor import TutorProfile
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewResponse, TutorReviewsResponse
from app.services import catalog_service, review_service
from app.services.matching_service import tutor_for_user

router = APIRouter()


def _to_response(r: Review) -> ReviewResponse:
    return ReviewResponse(
        id=r.id,
        tutor_id=r.tutor_id,
        reviewer_id=r.reviewer_id,
        reviewer_name=r.reviewer.full_name if r.reviewer else "",
        course_id=r.course_id,
        course_title=r.course.title if r.course else None,
        rating=r.rating,
        comment=r.comment,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _tutor_reviews(db: Session, tutor: TutorProfile) -> TutorReviewsResponse:
    summary = review_service.rating_summary(db, tutor)
    return TutorReviewsResponse(
        reviews=[_to_response(r) for r in review_service.list_for_tutor(db, tutor)],
        count=summary["count"],
        average=summary["average"],
    )


@router.post("/tutors/{tutor_id}", response_model=ReviewResponse, summary="Review a tutor")
def submit_review(
    tutor_id: UUID,
    payload: ReviewCreate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    review = review_service.submit_review(
        db, current_user, tutor_id, payload.rating, payload.comment, payload.course_id
    )
    return _to_response(review)


@router.get("/tutors/me", response_model=TutorReviewsResponse, summary="Own reviews (tutor)")
def my_reviews(
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    return _tutor_reviews(db, tutor_for_user(current_user))


@router.get("/tutors/{tutor_id}", response_model=TutorReviewsResponse, summary="A tutor's reviews")
def tutor_reviews(tutor_id: UUID, db: Session = Depends(get_db)):
    return _tutor_reviews(db, catalog_service.get_tutor(db, tutor_id))
