# app/api/v1/endpoints/assignments.py
# Quiz assignments for confirmed bookings
#
# POST /assignments/bookings/{booking_id}      -- create (or return the open) attempt
# GET  /assignments/bookings/{booking_id}      -- all attempts, oldest first
# GET  /assignments/{assignment_id}            -- one attempt
# POST /assignments/{assignment_id}/submit     -- student submits answers, graded at once
#
# Students never see correct_index; the booking's tutor and admins do.

from typing import List, Union
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import question_generator, require_login, require_student
from app.db.session import get_db
from app.models.assignment import Assignment
from app.models.user import User
from app.schemas.assignment import (
    AssignmentCreateResponse,
    AssignmentResponse,
    AssignmentResultResponse,
    AssignmentReviewResponse,
    AssignmentSubmit,
    QuestionOut,
    QuestionWithAnswer,
)
from app.services import assignment_service
from app.services.question_generator import QuestionGenerator

router = APIRouter()


def _to_response(a: Assignment, include_answers: bool = False) -> AssignmentResponse:
    fields = dict(
        id=a.id,
        booking_id=a.booking_id,
        course_id=a.course_id,
        attempt_number=a.attempt_number,
        status=a.status,
        student_answers=a.student_answers,
        numeric_grade=a.numeric_grade,
        created_at=a.created_at,
        graded_at=a.graded_at,
    )
    questions = a.questions or []
    if include_answers:
        return AssignmentReviewResponse(
            questions=[QuestionWithAnswer(**q) for q in questions], **fields
        )
    return AssignmentResponse(
        questions=[
            QuestionOut(text=q["text"], type=q["type"], options=q["options"])
            for q in questions
        ],
        **fields,
    )


@router.post(
    "/bookings/{booking_id}",
    response_model=AssignmentCreateResponse,
    summary="Create an assignment attempt for a booking",
)
def create_assignment(
    booking_id: UUID,
    current_user: User = Depends(require_login),
    generator: QuestionGenerator = Depends(question_generator),
    db: Session = Depends(get_db),
):
    assignment, already_exists = assignment_service.create_assignment(
        db, current_user, booking_id, generator
    )
    include = assignment_service.can_see_answers(current_user, assignment.booking)
    return AssignmentCreateResponse(
        assignment=_to_response(assignment, include),
        already_exists=already_exists,
    )


@router.get(
    "/bookings/{booking_id}",
    response_model=List[Union[AssignmentReviewResponse, AssignmentResponse]],
    summary="List assignment attempts for a booking",
)
def list_attempts(
    booking_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    attempts, include = assignment_service.list_attempts(db, current_user, booking_id)
    return [_to_response(a, include) for a in attempts]


@router.get(
    "/{assignment_id}",
    response_model=Union[AssignmentReviewResponse, AssignmentResponse],
    summary="Get an assignment attempt",
)
def get_assignment(
    assignment_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    assignment, include = assignment_service.get_assignment(db, current_user, assignment_id)
    return _to_response(assignment, include)


@router.post(
    "/{assignment_id}/submit",
    response_model=AssignmentResultResponse,
    summary="Submit answers",
)
def submit_assignment(
    assignment_id: UUID,
    payload: AssignmentSubmit,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    result = assignment_service.submit_assignment(db, current_user, assignment_id, payload.answers)
    assignment = result["assignment"]
    return AssignmentResultResponse(
        assignment_id=assignment.id,
        attempt_number=assignment.attempt_number,
        numeric_grade=result["numeric_grade"],
        correct=result["correct"],
        total=result["total"],
        classification=result["classification"],
        enrollment_progress=result["enrollment_progress"],
    )
