# app/services/office_hours_service.py
# Office hours: students ask tutors questions during availability windows
#
# A student can ask when all of these hold:
#   1. they are enrolled in the course
#   2. they hold a confirmed booking for that course with this tutor
#   3. right now (UTC) falls inside one of the tutor's availability slots
# Tutors reply to their own messages at any time.

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.core.logging import get_logger
from app.db.base_class import utcnow
from app.models.booking import Booking
from app.models.enrollment import Enrollment
from app.models.office_hours import OfficeHourMessage
from app.models.tutor import AvailabilitySlot
from app.models.user import User
from app.services.matching_service import get_tutor_or_404, tutor_for_user

logger = get_logger("office_hours")


def is_within_availability(slots: Iterable[AvailabilitySlot], now: datetime) -> bool:
    """Both window ends are inclusive."""
    minute = now.hour * 60 + now.minute
    return any(
        slot.date == now.date() and slot.start_minute <= minute <= slot.end_minute
        for slot in slots
    )


def send_question(
    db: Session,
    student: User,
    tutor_id: UUID,
    course_id: UUID,
    message: str,
    now: Optional[datetime] = None,
) -> OfficeHourMessage:
    message = (message or "").strip()
    if not message:
        raise ValidationError("Message is required.")

    tutor = get_tutor_or_404(db, tutor_id)

    enrolled = db.query(Enrollment.id).filter(
        Enrollment.student_id == student.id,
        Enrollment.course_id == course_id,
    ).first()
    if not enrolled:
        raise Forbidden("You are not enrolled in this course.")

    booked = db.query(Booking.id).filter(
        Booking.student_id == student.id,
        Booking.tutor_id == tutor.id,
        Booking.course_id == course_id,
        Booking.status == "confirmed",
    ).first()
    if not booked:
        raise Forbidden(
            "You need a confirmed booking with this tutor for this course before sending questions."
        )

    if not is_within_availability(tutor.availability, now or utcnow()):
        raise ValidationError(
            "The tutor is not currently in office hours. "
            "Please try again during their available time."
        )

    msg = OfficeHourMessage(
        tutor_id=tutor.id,
        student_id=student.id,
        course_id=course_id,
        message=message,
    )
    db.add(msg)
    db.commit()
    logger.info(f"Office-hour question {msg.id} from {student.id} to tutor {tutor.id}")
    return msg


def reply(db: Session, user: User, message_id: UUID, text: str) -> OfficeHourMessage:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Reply text is required.")

    tutor = tutor_for_user(user)
    msg = db.query(OfficeHourMessage).filter(OfficeHourMessage.id == message_id).first()
    if not msg:
        raise NotFound("Message not found.")
    if msg.tutor_id != tutor.id:
        raise Forbidden("Not allowed to reply to this message.")

    msg.reply = text
    msg.replied_at = utcnow()
    db.commit()
    return msg


def list_for_tutor(db: Session, user: User) -> List[OfficeHourMessage]:
    """Newest first."""
    tutor = tutor_for_user(user)
    return db.query(OfficeHourMessage).filter(
        OfficeHourMessage.tutor_id == tutor.id
    ).order_by(OfficeHourMessage.created_at.desc()).all()


def list_for_student(
    db: Session, student: User, course_id: Optional[UUID] = None
) -> List[OfficeHourMessage]:
    """Oldest first, like a chat thread."""
    query = db.query(OfficeHourMessage).filter(OfficeHourMessage.student_id == student.id)
    if course_id:
        query = query.filter(OfficeHourMessage.course_id == course_id)
    return query.order_by(OfficeHourMessage.created_at.asc()).all()
