# app/api/v1/endpoints/courses.py
# Course catalog
#
# GET    /courses/              -- public: published courses
# GET    /courses/all           -- admin: every course, ?unassigned=true for open ones
# GET    /courses/{id}          -- course detail
# POST   /courses/              -- admin: create (unassigned → course-match push)
# PATCH  /courses/{id}          -- admin: update, including instructor assignment
# DELETE /courses/{id}          -- admin: delete

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.dependencies import require_admin
from app.db.session import get_db
from app.models.course import Course
from app.models.user import User
from app.schemas.course import CourseCreate, CourseResponse, CourseUpdate
from app.schemas.notification import MessageResponse
from app.services import catalog_service

router = APIRouter()


def course_to_response(c: Course) -> CourseResponse:
    return CourseResponse(
        id=c.id,
        title=c.title,
        description=c.description,
        category_id=c.category_id,
        category_name=c.category.name if c.category else None,
        price=float(c.price or 0),
        level=c.level,
        max_students=c.max_students or 0,
        instructor_id=c.instructor_id,
        instructor_name=c.instructor.full_name if c.instructor else None,
        is_published=c.is_published,
        prerequisite_ids=[p.id for p in c.prerequisites],
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


@router.get("/", response_model=List[CourseResponse], summary="List published courses")
def list_published_courses(
    category_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
):
    courses = catalog_service.list_courses(db, published_only=True, category_id=category_id)
    return [course_to_response(c) for c in courses]


@router.get("/all", response_model=List[CourseResponse], summary="List all courses (admin)")
def list_all_courses(
    unassigned: Optional[bool] = Query(None),
    category_id: Optional[UUID] = Query(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    courses = catalog_service.list_courses(
        db, published_only=False, unassigned=unassigned, category_id=category_id
    )
    return [course_to_response(c) for c in courses]


@router.get("/{course_id}", response_model=CourseResponse, summary="Course detail")
def get_course(course_id: UUID, db: Session = Depends(get_db)):
    return course_to_response(catalog_service.get_course(db, course_id))


@router.post("/", response_model=CourseResponse, status_code=201, summary="Create a course")
def create_course(
    payload: CourseCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    course = catalog_service.create_course(db, payload.model_dump())
    return course_to_response(course)


@router.patch("/{course_id}", response_model=CourseResponse, summary="Update a course")
def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    course = catalog_service.update_course(db, course_id, payload.model_dump(exclude_unset=True))
    return course_to_response(course)


@router.delete("/{course_id}", response_model=MessageResponse, summary="Delete a course")
def delete_course(
    course_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    catalog_service.delete_course(db, course_id)
    return MessageResponse(message="Course deleted.")
