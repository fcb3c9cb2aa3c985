# app/schemas/enrollment.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class EnrollmentResponse(BaseModel):
    id: UUID
    student_id: UUID
    course_id: UUID
    course_title: str
    booking_id: UUID
    status: str
    progress: int
    completed_resource_ids: List[str] = []
    total_resources: int
    assignment_id: Optional[UUID] = None
    started_at: datetime
    completed_at: Optional[datetime] = None


class ProgressUpdate(BaseModel):
    completed_resource_ids: List[str]
