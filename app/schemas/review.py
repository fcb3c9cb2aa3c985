# app/schemas/review.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)
    course_id: Optional[UUID] = None


class ReviewResponse(BaseModel):
    id: UUID
    tutor_id: UUID
    reviewer_id: UUID
    reviewer_name: str
    course_id: Optional[UUID] = None
    course_title: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TutorReviewsResponse(BaseModel):
    reviews: List[ReviewResponse]
    count: int
    average: Optional[float] = None
