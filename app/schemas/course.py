# app/schemas/course.py
# Pydantic request/response models for categories and courses

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

CourseLevel = Literal["beginner", "intermediate", "advanced"]


# ── Categories ────────────────────────────────────────────────────────────────

class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category name cannot be empty.")
        return v


class CategoryResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None


# ── Courses ───────────────────────────────────────────────────────────────────

class CourseCreate(BaseModel):
    """Admin creates a course. Without an instructor it stays unpublished."""
    title: str
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    level: CourseLevel = "beginner"
    max_students: int = Field(default=0, ge=0)
    instructor_id: Optional[UUID] = None
    is_published: bool = False
    prerequisite_ids: List[UUID] = []

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty.")
        return v


class CourseUpdate(BaseModel):
    """Partial update -- only fields sent are applied. instructor_id=null unassigns."""
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    level: Optional[CourseLevel] = None
    max_students: Optional[int] = Field(default=None, ge=0)
    instructor_id: Optional[UUID] = None
    is_published: Optional[bool] = None
    prerequisite_ids: Optional[List[UUID]] = None


class CourseResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    category_id: Optional[UUID] = None
    category_name: Optional[str] = None
    price: float
    level: str
    max_students: int
    instructor_id: Optional[UUID] = None
    instructor_name: Optional[str] = None
    is_published: bool
    prerequisite_ids: List[UUID] = []
    created_at: datetime
    updated_at: datetime


class CourseSuggestRequest(BaseModel):
    cv_text: str
    limit: int = Field(default=5, ge=1, le=20)


class CourseSuggestResponse(BaseModel):
    course_ids: List[UUID]
    courses: List[CourseResponse]
