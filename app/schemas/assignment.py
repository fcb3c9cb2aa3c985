# app/schemas/assignment.py
# Pydantic models for quiz assignments
#
# Students never receive correct_index. Tutors and admins do.

from datetime import datetime
from typing import Any, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel


class QuestionOut(BaseModel):
    text: str
    type: str                # mcq | boolean
    options: List[str]


class QuestionWithAnswer(QuestionOut):
    correct_index: int


class AssignmentResponse(BaseModel):
    id: UUID
    booking_id: UUID
    course_id: UUID
    attempt_number: int
    status: str              # created | submitted | graded
    questions: List[QuestionOut]
    student_answers: Optional[List[Optional[int]]] = None
    numeric_grade: Optional[int] = None
    created_at: datetime
    graded_at: Optional[datetime] = None


class AssignmentReviewResponse(AssignmentResponse):
    """Tutor / admin view."""
    questions: List[QuestionWithAnswer]


class AssignmentCreateResponse(BaseModel):
    # Review first so the tutor / admin view keeps correct_index
    assignment: Union[AssignmentReviewResponse, AssignmentResponse]
    already_exists: bool


class AssignmentSubmit(BaseModel):
    # Anything that is not an int is treated as unanswered
    answers: List[Any]


class AssignmentResultResponse(BaseModel):
    assignment_id: UUID
    attempt_number: int
    numeric_grade: int
    correct: int
    total: int
    classification: str      # fail | below_passing | pass
    enrollment_progress: Optional[int] = None
