# app/models/booking.py
# Booking lifecycle + payment attempts
#
# Flow:
#   1. Student requests a course          → status=requested (tutor_id snapshot)
#   2. Admin accepts / declines           → awaiting_payment | declined
#   3. Student pays                       → confirmed (price snapshot) + Enrollment
#   Student may cancel while requested / awaiting_payment.
#
# Status changes go through conditional updates in
# app/services/booking_service.py -- never assign .status directly.

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base, JSONType, utcnow

BOOKING_STATUSES = (
    "requested",         # Student requested
    "awaiting_payment",  # Admin approved, waiting for student to pay
    "confirmed",         # Paid and enrolled
    "declined",          # Admin declined
    "canceled",          # Student canceled before confirmation
)


class Booking(Base):
    """
    A student's request to be taught a course.
    tutor_id is copied from Course.instructor_id at creation time.
    price is copied from Course.price when payment succeeds.
    """
    __tablename__ = "bookings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # ── Parties ───────────────────────────────────────────────────────────────
    student_id = Column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tutor_id = Column(
        Uuid,
        ForeignKey("tutor_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── Schedule ──────────────────────────────────────────────────────────────
    start = Column(DateTime(timezone=True), nullable=False, index=True)
    end = Column(DateTime(timezone=True), nullable=False)

    # ── Status ────────────────────────────────────────────────────────────────
    status = Column(
        Enum(*BOOKING_STATUSES, name="booking_status_enum"),
        nullable=False,
        default="requested",
        index=True,
    )

    # Snapshot of Course.price at confirmation -- NULL until paid
    price = Column(Numeric(10, 2), nullable=True)

    # Version counter for assignment attempts (compare-and-swap guard)
    assignment_attempts = Column(Integer, nullable=False, default=0)

    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    student = relationship("User")
    course = relationship("Course")
    tutor = relationship("TutorProfile")
    payments = relationship("Payment", back_populates="booking", order_by="Payment.created_at")

    def __repr__(self) -> str:
        return f"<Booking student={self.student_id} course={self.course_id} status={self.status}>"


class Payment(Base):
    """One row per charge attempt against the payment collaborator."""
    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id = Column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    enrollment_id = Column(
        Uuid, ForeignKey("enrollments.id", ondelete="SET NULL"), nullable=True
    )

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    provider = Column(String(32), nullable=False)
    status = Column(
        Enum("pending", "paid", "failed", name="payment_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
    provider_reference = Column(String(255), nullable=True)
    decline_reason = Column(Text, nullable=True)
    provider_meta = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    booking = relationship("Booking", back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment booking={self.booking_id} status={self.status} amount={self.amount}>"
