# app/schemas/matching.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class MatchDecision(BaseModel):
    tutor_id: UUID


class ApplicationResponse(BaseModel):
    course_id: UUID
    course_title: str
    tutor_id: UUID
    already_applied: bool


class ApplicantItem(BaseModel):
    tutor_id: UUID
    tutor_name: str
    applied_at: datetime


class PendingApplicationsItem(BaseModel):
    course_id: UUID
    course_title: str
    category_name: Optional[str] = None
    assigned: bool
    applicants: List[ApplicantItem]


class MatchResultResponse(BaseModel):
    course_id: UUID
    course_title: str
    instructor_id: Optional[UUID] = None
    is_published: bool
