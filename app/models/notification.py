# app/models/notification.py
# In-app notification queue for matching workflow events

import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.base_class import Base, JSONType, utcnow

NOTIFICATION_TYPES = (
    "tutor_application",          # Admin: a tutor applied to teach a course (actionable)
    "tutor_applied",              # Tutor: confirmation of own application
    "course_match",               # Tutor: new unassigned course in a familiar category (actionable)
    "course_accepted",            # Tutor: application accepted
    "course_rejected",            # Tutor: application rejected
    "course_assigned_elsewhere",  # Tutor: course went to another applicant
    "course_assigned_admin",      # Admin: tutor X now teaches course Y
)

ACTION_STATUSES = ("none", "applied", "dismissed")


class Notification(Base):
    """
    In-app notification for a user.
    Created by app/services/notification_service.py.

    payload is a denormalized snapshot (course title, tutor name, ...) taken
    at send time so the notification stays readable after the course or
    tutor is edited.

    action_status moves none → applied | dismissed exactly once, through a
    conditional update; it never reverts.
    """
    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── Type ──────────────────────────────────────────────────────────────────
    notification_type = Column(
        Enum(*NOTIFICATION_TYPES, name="notification_type_enum"),
        nullable=False,
        index=True,
    )

    # ── Content ───────────────────────────────────────────────────────────────
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)

    # ── Snapshot ──────────────────────────────────────────────────────────────
    # Named payload (not metadata -- reserved by SQLAlchemy)
    # Examples:
    #   tutor_application: {"course_id", "course_title", "category_name", "tutor_id", "tutor_name"}
    #   course_accepted:   {"course_id", "course_title"}
    payload = Column(JSONType, nullable=False, default=dict)

    # Copied out of payload for filtering / dedupe
    course_id = Column(Uuid, nullable=True, index=True)
    tutor_id = Column(Uuid, nullable=True, index=True)

    # ── Status ────────────────────────────────────────────────────────────────
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    action_status = Column(
        Enum(*ACTION_STATUSES, name="notification_action_status_enum"),
        nullable=False,
        default="none",
        index=True,
    )
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # ── Relationships ─────────────────────────────────────────────────────────
    user = relationship("User", back_populates="notifications")

    def __repr__(self) -> str:
        return (
            f"<Notification user={self.user_id} "
            f"type={self.notification_type} action={self.action_status}>"
        )
