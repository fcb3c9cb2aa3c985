# app/schemas/tutor.py
# Tutor profile and availability

import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class TutorProfileUpdate(BaseModel):
    bio: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    cv_reference: Optional[str] = None


class AvailabilitySlotIn(BaseModel):
    date: datetime.date
    start_minute: int
    end_minute: int


class AvailabilityUpdate(BaseModel):
    slots: List[AvailabilitySlotIn]


class AvailabilitySlotResponse(BaseModel):
    date: datetime.date
    start_minute: int
    end_minute: int


class TutorResponse(BaseModel):
    id: UUID
    user_id: UUID
    full_name: str
    email: str
    bio: Optional[str] = None
    experience_years: int
    hourly_rate: float
    cv_reference: Optional[str] = None
    course_ids: List[UUID] = []
    availability: List[AvailabilitySlotResponse] = []
