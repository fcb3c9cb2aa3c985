# app/services/review_service.py
# Student → tutor reviews
#
# One review per (student, tutor, course); submitting again overwrites it.

from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.models.review import Review
from app.models.tutor import TutorProfile
from app.models.user import User
from app.services.matching_service import get_course_or_404, get_tutor_or_404

logger = get_logger("reviews")

MAX_COMMENT_LENGTH = 2000


def submit_review(
    db: Session,
    student: User,
    tutor_id: UUID,
    rating: int,
    comment: Optional[str] = None,
    course_id: Optional[UUID] = None,
) -> Review:
    if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be a whole number from 1 to 5.")
    if comment and len(comment) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters.")

    tutor = get_tutor_or_404(db, tutor_id)
    if course_id is not None:
        get_course_or_404(db, course_id)

    review = db.query(Review).filter(
        Review.reviewer_id == student.id,
        Review.tutor_id == tutor.id,
        Review.course_id == course_id if course_id is not None else Review.course_id.is_(None),
    ).first()
    if review is None:
        review = Review(reviewer_id=student.id, tutor_id=tutor.id, course_id=course_id)
        db.add(review)

    review.rating = rating
    review.comment = comment
    db.commit()
    db.refresh(review)
    logger.info(f"Review by {student.id} for tutor {tutor.id}: {rating}/5")
    return review


def list_for_tutor(db: Session, tutor: TutorProfile) -> List[Review]:
    return db.query(Review).filter(
        Review.tutor_id == tutor.id
    ).order_by(Review.created_at.desc()).all()


def rating_summary(db: Session, tutor: TutorProfile) -> Dict:
    count, average = db.query(func.count(Review.id), func.avg(Review.rating)).filter(
        Review.tutor_id == tutor.id
    ).one()
    return {
        "count": count or 0,
        "average": round(float(average), 2) if average is not None else None,
    }
