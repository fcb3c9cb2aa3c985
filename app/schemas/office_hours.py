# app/schemas/office_hours.py

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class QuestionCreate(BaseModel):
    course_id: UUID
    message: str = Field(min_length=1, max_length=4000)


class ReplyCreate(BaseModel):
    reply: str = Field(min_length=1, max_length=4000)


class OfficeHourMessageResponse(BaseModel):
    id: UUID
    tutor_id: UUID
    tutor_name: str
    student_id: UUID
    student_name: str
    course_id: UUID
    course_title: str
    message: str
    reply: Optional[str] = None
    replied_at: Optional[datetime] = None
    created_at: datetime
