# app/schemas/booking.py
# Pydantic request/response models for the booking lifecycle

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel


# ── Requests (input) ──────────────────────────────────────────────────────────

class BookingCreate(BaseModel):
    """Student requests a course. Defaults to a one-hour session starting now."""
    course_id: UUID
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class PaymentRequest(BaseModel):
    """
    method=card      → details: card_number, exp_month, exp_year, cvc
    method=paypal    → details: {} (simulated)
    method=razorpay  → details: razorpay_payment_id, razorpay_order_id, razorpay_signature
    """
    method: str
    details: Dict[str, Any] = {}


# ── Responses (output) ────────────────────────────────────────────────────────

class BookingResponse(BaseModel):
    id: UUID
    status: str          # requested | awaiting_payment | confirmed | declined | canceled

    student_id: UUID
    student_name: str
    course_id: UUID
    course_title: str
    tutor_id: UUID
    tutor_name: str

    start: datetime
    end: datetime
    price: Optional[float] = None      # set once paid
    assignment_attempts: int

    created_at: datetime
    confirmed_at: Optional[datetime] = None


class PaymentResponse(BaseModel):
    id: UUID
    amount: float
    currency: str
    provider: str
    status: str
    provider_reference: Optional[str] = None
    decline_reason: Optional[str] = None
    created_at: datetime


class EnrollmentSummary(BaseModel):
    id: UUID
    course_id: UUID
    booking_id: UUID
    status: str
    progress: int


class PaymentResultResponse(BaseModel):
    booking: BookingResponse
    payment: PaymentResponse
    enrollment: EnrollmentSummary


class BookingListResponse(BaseModel):
    bookings: List[BookingResponse]
    total: int
