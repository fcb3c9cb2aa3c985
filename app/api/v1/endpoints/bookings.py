# app/api/v1/endpoints/bookings.py
# Booking lifecycle endpoints
#
# POST  /bookings/                     -- student requests a course
# GET   /bookings/                     -- own (student) / taught (tutor) / all (admin)
# GET   /bookings/{id}                 -- detail for a party of the booking
# PATCH /bookings/{id}/accept          -- admin: requested → awaiting_payment
# PATCH /bookings/{id}/decline         -- admin: requested → declined
# PATCH /bookings/{id}/cancel          -- student: requested|awaiting_payment → canceled
# POST  /bookings/{id}/pay             -- student: awaiting_payment → confirmed + enrollment
# POST  /bookings/{id}/reconcile       -- student/admin: ensure the enrollment exists
# GET   /bookings/{id}/payments        -- payment attempts

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.dependencies import (
    payment_gateway,
    require_admin,
    require_login,
    require_student,
)
from app.db.session import get_db
from app.models.booking import Booking, Payment
from app.models.enrollment import Enrollment
from app.models.user import User
from app.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    EnrollmentSummary,
    PaymentRequest,
    PaymentResponse,
    PaymentResultResponse,
)
from app.services import booking_service
from app.services.payment_gateway import PaymentGateway

router = APIRouter()


def _to_response(b: Booking) -> BookingResponse:
    return BookingResponse(
        id=b.id,
        status=b.status,
        student_id=b.student_id,
        student_name=b.student.full_name if b.student else "",
        course_id=b.course_id,
        course_title=b.course.title if b.course else "",
        tutor_id=b.tutor_id,
        tutor_name=b.tutor.full_name if b.tutor else "",
        start=b.start,
        end=b.end,
        price=float(b.price) if b.price is not None else None,
        assignment_attempts=b.assignment_attempts or 0,
        created_at=b.created_at,
        confirmed_at=b.confirmed_at,
    )


def _payment_response(p: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=p.id,
        amount=float(p.amount),
        currency=p.currency,
        provider=p.provider,
        status=p.status,
        provider_reference=p.provider_reference,
        decline_reason=p.decline_reason,
        created_at=p.created_at,
    )


def _enrollment_summary(e: Enrollment) -> EnrollmentSummary:
    return EnrollmentSummary(
        id=e.id,
        course_id=e.course_id,
        booking_id=e.booking_id,
        status=e.status,
        progress=e.progress,
    )


@router.post("/", response_model=BookingResponse, status_code=201, summary="Request a booking")
def create_booking(
    payload: BookingCreate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    booking = booking_service.create_booking(
        db, current_user, payload.course_id, payload.start, payload.end
    )
    return _to_response(booking)


@router.get("/", response_model=BookingListResponse, summary="List bookings")
def list_bookings(
    status: Optional[str] = Query(None, description="requested | awaiting_payment | confirmed | declined | canceled"),
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    bookings = booking_service.list_bookings(db, current_user, status)
    return BookingListResponse(
        bookings=[_to_response(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/{booking_id}", response_model=BookingResponse, summary="Booking detail")
def get_booking(
    booking_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    return _to_response(booking_service.get_booking_for_user(db, current_user, booking_id))


@router.patch("/{booking_id}/accept", response_model=BookingResponse, summary="Accept a booking")
def accept_booking(
    booking_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _to_response(booking_service.accept_booking(db, booking_id))


@router.patch("/{booking_id}/decline", response_model=BookingResponse, summary="Decline a booking")
def decline_booking(
    booking_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _to_response(booking_service.decline_booking(db, booking_id))


@router.patch("/{booking_id}/cancel", response_model=BookingResponse, summary="Cancel own booking")
def cancel_booking(
    booking_id: UUID,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    return _to_response(booking_service.cancel_booking(db, current_user, booking_id))


@router.post("/{booking_id}/pay", response_model=PaymentResultResponse, summary="Pay for a booking")
def pay_booking(
    booking_id: UUID,
    payload: PaymentRequest,
    current_user: User = Depends(require_student),
    gateway: PaymentGateway = Depends(payment_gateway),
    db: Session = Depends(get_db),
):
    booking, payment, enrollment = booking_service.pay_booking(
        db, current_user, booking_id, payload.method, payload.details, gateway
    )
    return PaymentResultResponse(
        booking=_to_response(booking),
        payment=_payment_response(payment),
        enrollment=_enrollment_summary(enrollment),
    )


@router.post(
    "/{booking_id}/reconcile",
    response_model=EnrollmentSummary,
    summary="Ensure a confirmed booking has its enrollment",
)
def reconcile_enrollment(
    booking_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    enrollment = booking_service.reconcile_enrollment(db, current_user, booking_id)
    return _enrollment_summary(enrollment)


@router.get(
    "/{booking_id}/payments",
    response_model=List[PaymentResponse],
    summary="Payment attempts for a booking",
)
def list_payments(
    booking_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    booking = booking_service.get_booking_for_user(db, current_user, booking_id)
    return [_payment_response(p) for p in booking.payments]
