# app/api/v1/endpoints/office_hours.py
# Office-hour questions
#
# POST /office-hours/tutors/{tutor_id}/questions  -- student asks (inside availability)
# GET  /office-hours/me/messages                  -- tutor: questions received
# GET  /office-hours/my-messages                  -- student: own questions (?course_id=)
# POST /office-hours/{message_id}/reply           -- tutor answers

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.dependencies import require_student, require_tutor
from app.db.session import get_db
from app.models.office_hours import OfficeHourMessage
from app.models.user import User
from app.schemas.office_hours import OfficeHourMessageResponse, QuestionCreate, ReplyCreate
from app.services import office_hours_service

router = APIRouter()


def _to_response(m: OfficeHourMessage) -> OfficeHourMessageResponse:
    return OfficeHourMessageResponse(
        id=m.id,
        tutor_id=m.tutor_id,
        tutor_name=m.tutor.full_name if m.tutor else "",
        student_id=m.student_id,
        student_name=m.student.full_name if m.student else "",
        course_id=m.course_id,
        course_title=m.course.title if m.course else "",
        message=m.message,
        reply=m.reply,
        replied_at=m.replied_at,
        created_at=m.created_at,
    )


@router.post(
    "/tutors/{tutor_id}/questions",
    response_model=OfficeHourMessageResponse,
    status_code=201,
    summary="Ask a tutor during office hours",
)
def send_question(
    tutor_id: UUID,
    payload: QuestionCreate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    msg = office_hours_service.send_question(
        db, current_user, tutor_id, payload.course_id, payload.message
    )
    return _to_response(msg)


@router.get(
    "/me/messages",
    response_model=List[OfficeHourMessageResponse],
    summary="Questions received (tutor)",
)
def tutor_messages(
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    return [_to_response(m) for m in office_hours_service.list_for_tutor(db, current_user)]


@router.get(
    "/my-messages",
    response_model=List[OfficeHourMessageResponse],
    summary="Own questions (student)",
)
def student_messages(
    course_id: Optional[UUID] = Query(None),
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    messages = office_hours_service.list_for_student(db, current_user, course_id)
    return [_to_response(m) for m in messages]


@router.post(
    "/{message_id}/reply",
    response_model=OfficeHourMessageResponse,
    summary="Reply to a question",
)
def reply(
    message_id: UUID,
    payload: ReplyCreate,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    return _to_response(office_hours_service.reply(db, current_user, message_id, payload.reply))
