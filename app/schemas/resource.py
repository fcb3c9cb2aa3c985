# app/schemas/resource.py

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class ResourceCreate(BaseModel):
    course_id: UUID
    title: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=2048)
    kind: Literal["link", "file"] = "link"


class ResourceResponse(BaseModel):
    id: UUID
    tutor_id: UUID
    course_id: UUID
    title: str
    kind: str
    url: str
    created_at: datetime
