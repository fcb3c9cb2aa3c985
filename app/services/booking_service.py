# app/services/booking_service.py
# Booking state machine
#
#   requested ──accept──▶ awaiting_payment ──pay──▶ confirmed
#       │                      │
#       ├──decline──▶ declined │
#       └──cancel───▶ canceled ◀──cancel
#
# confirmed / declined / canceled are terminal. Every transition is a
# conditional UPDATE ... WHERE status IN (:expected) checked by rowcount, so
# two concurrent callers can never both move the same booking.

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AlreadyProcessed,
    Forbidden,
    InvalidTransition,
    NotFound,
    PaymentDeclined,
    ValidationError,
)
from app.core.logging import get_logger
from app.db.base_class import utcnow
from app.models.booking import Booking, Payment
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.user import User
from app.services import enrollment_service
from app.services.payment_gateway import PaymentGateway

logger = get_logger("bookings")

DEFAULT_SESSION_LENGTH = timedelta(hours=1)


# ── Helpers ───────────────────────────────────────────────────────────────────

def get_booking_or_404(db: Session, booking_id: UUID) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFound("Booking not found.")
    return booking


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _require_owner(booking: Booking, student: User) -> None:
    if booking.student_id != student.id:
        raise Forbidden("This booking belongs to another student.")


def _transition(
    db: Session,
    booking: Booking,
    expected: Sequence[str],
    new_status: str,
    action: str,
    **values,
) -> Booking:
    """Conditional status change. Raises InvalidTransition with the status actually found."""
    moved = db.query(Booking).filter(
        Booking.id == booking.id, Booking.status.in_(list(expected))
    ).update(
        {"status": new_status, "updated_at": utcnow(), **values},
        synchronize_session=False,
    )
    db.refresh(booking)
    if not moved:
        raise InvalidTransition("booking", booking.status, action)
    return booking


# ── Create ────────────────────────────────────────────────────────────────────

def create_booking(
    db: Session,
    student: User,
    course_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Booking:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFound("Course not found.")
    if course.instructor_id is None:
        raise ValidationError("This course has no instructor yet and cannot be booked.")

    start = _as_utc(start) or datetime.now(timezone.utc)
    end = _as_utc(end) or start + DEFAULT_SESSION_LENGTH
    if start >= end:
        raise ValidationError("Booking start must be before its end.")

    booking = Booking(
        student_id=student.id,
        course_id=course.id,
        tutor_id=course.instructor_id,
        start=start,
        end=end,
        status="requested",
        assignment_attempts=0,
    )
    db.add(booking)
    db.commit()
    logger.info(f"Booking {booking.id} requested by {student.id} for course {course.id}")
    return booking


# ── Admin decisions ───────────────────────────────────────────────────────────

def accept_booking(db: Session, booking_id: UUID) -> Booking:
    booking = get_booking_or_404(db, booking_id)
    _transition(db, booking, ["requested"], "awaiting_payment", "accept")
    db.commit()
    logger.info(f"Booking {booking.id} accepted, awaiting payment")
    return booking


def decline_booking(db: Session, booking_id: UUID) -> Booking:
    booking = get_booking_or_404(db, booking_id)
    _transition(db, booking, ["requested"], "declined", "decline")
    db.commit()
    logger.info(f"Booking {booking.id} declined")
    return booking


# ── Student actions ───────────────────────────────────────────────────────────

def cancel_booking(db: Session, student: User, booking_id: UUID) -> Booking:
    booking = get_booking_or_404(db, booking_id)
    _require_owner(booking, student)
    _transition(db, booking, ["requested", "awaiting_payment"], "canceled", "cancel")
    db.commit()
    logger.info(f"Booking {booking.id} canceled by student")
    return booking


def _record_payment(
    db: Session,
    booking: Booking,
    amount: Decimal,
    currency: str,
    method: str,
    status: str,
    reference: Optional[str] = None,
    reason: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Payment:
    payment = Payment(
        booking_id=booking.id,
        amount=amount,
        currency=currency,
        provider=method,
        status=status,
        provider_reference=reference,
        decline_reason=reason,
        provider_meta=meta or {},
    )
    db.add(payment)
    db.flush()
    return payment


def pay_booking(
    db: Session,
    student: User,
    booking_id: UUID,
    method: str,
    details: Dict[str, Any],
    gateway: PaymentGateway,
) -> Tuple[Booking, Payment, Enrollment]:
    """
    Charge the course's current price and confirm the booking.

    The booking flip is the commit point. The enrollment is created after it
    through an idempotent lookup, so a crash in between is repaired by
    reconcile_enrollment().
    """
    booking = get_booking_or_404(db, booking_id)
    _require_owner(booking, student)

    if booking.status == "confirmed":
        raise AlreadyProcessed("This booking has already been paid.")
    if booking.status != "awaiting_payment":
        raise InvalidTransition("booking", booking.status, "pay for")

    course = db.query(Course).filter(Course.id == booking.course_id).first()
    if not course:
        raise NotFound("Course not found.")
    amount = Decimal(course.price or 0)
    currency = settings.payment_currency

    result = gateway.charge(amount, currency, method, details)

    if not result.success:
        _record_payment(
            db, booking, amount, currency, method, "failed",
            reference=result.reference, reason=result.reason, meta=result.meta,
        )
        db.commit()
        logger.info(f"Payment declined for booking {booking.id}: {result.reason}")
        raise PaymentDeclined(result.reason or "Payment was declined.", extra={"method": method})

    try:
        _transition(
            db, booking, ["awaiting_payment"], "confirmed", "pay for",
            price=amount, confirmed_at=utcnow(),
        )
    except InvalidTransition as e:
        reason = (
            "booking already confirmed"
            if e.current == "confirmed"
            else f"booking {e.current}"
        )
        _record_payment(
            db, booking, amount, currency, method, "failed",
            reference=result.reference, reason=reason, meta=result.meta,
        )
        db.commit()
        logger.warning(f"Pay lost the race for booking {booking.id}: {reason}")
        if e.current == "confirmed":
            raise AlreadyProcessed("This booking has already been paid.")
        raise

    payment = _record_payment(
        db, booking, amount, currency, method, "paid",
        reference=result.reference, meta=result.meta,
    )
    db.commit()
    logger.info(f"Booking {booking.id} confirmed, paid {amount} {currency} via {method}")

    enrollment = enrollment_service.get_or_create_for_booking(db, booking)
    payment.enrollment_id = enrollment.id
    db.commit()
    return booking, payment, enrollment


def reconcile_enrollment(db: Session, user: User, booking_id: UUID) -> Enrollment:
    """Return or create the enrollment for a confirmed booking. Safe to retry."""
    booking = get_booking_or_404(db, booking_id)
    if user.role != "admin":
        _require_owner(booking, user)
    if booking.status != "confirmed":
        raise InvalidTransition("booking", booking.status, "reconcile the enrollment of")
    return enrollment_service.get_or_create_for_booking(db, booking)


# ── Listing ───────────────────────────────────────────────────────────────────

def list_bookings(db: Session, user: User, status: Optional[str] = None) -> List[Booking]:
    """Students see their own, tutors what they teach, admins everything."""
    query = db.query(Booking)
    if user.role == "student":
        query = query.filter(Booking.student_id == user.id)
    elif user.role == "tutor":
        if not user.tutor_profile:
            return []
        query = query.filter(Booking.tutor_id == user.tutor_profile.id)
    if status:
        query = query.filter(Booking.status == status)
    return query.order_by(Booking.created_at.desc()).all()


def get_booking_for_user(db: Session, user: User, booking_id: UUID) -> Booking:
    booking = get_booking_or_404(db, booking_id)
    if user.role == "admin":
        return booking
    if user.role == "tutor" and user.tutor_profile and booking.tutor_id == user.tutor_profile.id:
        return booking
    if booking.student_id == user.id:
        return booking
    raise Forbidden("You do not have access to this booking.")
