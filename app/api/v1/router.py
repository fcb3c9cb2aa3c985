# app/api/v1/router.py
# Master router -- registers all endpoint routers under /api/v1
# Each endpoint module registers its own router; prefixes and tags live here

from fastapi import APIRouter

from app.api.v1.endpoints import (
    assignments,
    auth,
    bookings,
    categories,
    courses,
    enrollments,
    matching,
    notifications,
    office_hours,
    resources,
    reviews,
    tutors,
)

api_router = APIRouter()

# Auth
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Catalog
api_router.include_router(categories.router, prefix="/categories", tags=["Catalog - Categories"])
api_router.include_router(courses.router, prefix="/courses", tags=["Catalog - Courses"])
api_router.include_router(tutors.router, prefix="/tutors", tags=["Catalog - Tutors"])

# Booking lifecycle
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
api_router.include_router(resources.router, prefix="/resources", tags=["Resources"])

# Tutor-course matching
api_router.include_router(matching.router, prefix="/matching", tags=["Matching"])

# Assignments & grading
api_router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])

# Tutor feedback & office hours
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])
api_router.include_router(office_hours.router, prefix="/office-hours", tags=["Office Hours"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
