# app/services/notification_service.py
# Creates in-app notifications and sends emails via SendGrid
#
# Usage (from any workflow service):
#   from app.services.notification_service import notify
#   notify(db, user_id=tutor.user_id, notification_type="course_accepted",
#          title="Application accepted", message="You now teach Algebra I",
#          payload={"course_id": ..., "course_title": ...})
#
# Notifications are append-only. The only mutations are:
#   is_read        false → true
#   action_status  none  → applied | dismissed   (conditional, exactly once)

from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFound
from app.core.logging import get_logger
from app.db.base_class import utcnow
from app.models.course import Course
from app.models.notification import Notification
from app.models.user import User

logger = get_logger("notifications")


# Types that carry a decision for the recipient; hidden once actioned
ACTIONABLE_TYPES = {
    "tutor_application",    # Admin decides accept / reject
    "course_match",         # Tutor may apply
}

# Which types also send an email
EMAIL_TYPES = {
    "tutor_application",
    "course_accepted",
    "course_rejected",
}


def _as_uuid(value: Any) -> Optional[UUID]:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


def _json_safe(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (str(v) if isinstance(v, UUID) else v) for k, v in payload.items()}


def notify(
    db: Session,
    user_id: UUID,
    notification_type: str,
    title: str,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    send_email: bool = True,
    dedupe: bool = False,
) -> Notification:
    """
    Create an in-app notification and optionally send an email.

    Args:
        db: Database session
        user_id: Recipient user ID
        notification_type: One of NOTIFICATION_TYPES
        title: Short notification title
        message: Full notification body
        payload: Denormalized snapshot (course_id, course_title, tutor_id, ...)
        send_email: Override email sending (default: based on type)
        dedupe: Return an existing unactioned notification with the same
                {type, recipient, course_id, tutor_id} instead of adding one

    Returns:
        Created (or existing) Notification instance. Not committed.
    """
    payload = _json_safe(payload or {})
    course_id = _as_uuid(payload.get("course_id"))
    tutor_id = _as_uuid(payload.get("tutor_id"))

    if dedupe:
        existing = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.notification_type == notification_type,
            Notification.course_id == course_id,
            Notification.tutor_id == tutor_id,
            Notification.action_status == "none",
        ).first()
        if existing:
            return existing

    notification = Notification(
        user_id=user_id,
        notification_type=notification_type,
        title=title,
        message=message,
        payload=payload,
        course_id=course_id,
        tutor_id=tutor_id,
        is_read=False,
        action_status="none",
    )
    db.add(notification)
    db.flush()

    # Send email for important notification types
    if send_email and notification_type in EMAIL_TYPES:
        try:
            _send_email_notification(user_id, title, message, db)
        except Exception as e:
            # Email failure should never block the main flow
            logger.error(f"Email notification failed for user {user_id}: {e}")

    return notification


def set_action_status(
    db: Session,
    new_status: str,
    *criteria,
) -> int:
    """
    Conditional none → new_status for every notification matching criteria.
    A resolved notification is also marked read.
    Returns the number of rows this call moved; 0 means someone else got there first.
    """
    moved = db.query(Notification).filter(
        Notification.action_status == "none", *criteria
    ).update(
        {"action_status": new_status, "is_read": True, "resolved_at": utcnow()},
        synchronize_session=False,
    )
    if moved:
        _expire_loaded(db)
    return moved


def _expire_loaded(db: Session) -> None:
    # Bulk UPDATEs bypass the identity map and commits don't expire
    # (expire_on_commit=False), so reload any notification already loaded
    for obj in list(db.identity_map.values()):
        if isinstance(obj, Notification):
            db.expire(obj)


# ── Read side ─────────────────────────────────────────────────────────────────

def _visible(notifications: Iterable[Notification], live_course_ids: set) -> List[Notification]:
    """
    Newest-first input. Drops actioned decision rows, rows pointing at a
    deleted course, and older duplicates of {type, course_id, tutor_id}.
    """
    seen = set()
    visible = []
    for n in notifications:
        if n.notification_type in ACTIONABLE_TYPES and n.action_status != "none":
            continue
        if n.course_id is not None and n.course_id not in live_course_ids:
            continue
        if n.course_id is not None:
            key = (n.notification_type, n.course_id, n.tutor_id)
            if key in seen:
                continue
            seen.add(key)
        visible.append(n)
    return visible


def list_for_user(
    db: Session,
    user: User,
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[Notification], int, int]:
    """Returns (page, unread_count, total) over the visible notifications."""
    rows = (
        db.query(Notification)
        .filter(Notification.user_id == user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    course_ids = {n.course_id for n in rows if n.course_id is not None}
    live = set()
    if course_ids:
        live = {c.id for c in db.query(Course.id).filter(Course.id.in_(course_ids)).all()}

    visible = _visible(rows, live)
    unread_count = sum(1 for n in visible if not n.is_read)
    if unread_only:
        visible = [n for n in visible if not n.is_read]
    return visible[skip:skip + limit], unread_count, len(visible)


def get_for_user(db: Session, user: User, notification_id: UUID) -> Notification:
    n = db.query(Notification).filter(
        Notification.id == notification_id, Notification.user_id == user.id
    ).first()
    if not n:
        raise NotFound("Notification not found.")
    return n


def mark_read(db: Session, user: User, notification_id: UUID) -> Notification:
    n = get_for_user(db, user, notification_id)
    n.is_read = True
    db.commit()
    return n


def mark_all_read(db: Session, user: User) -> int:
    count = db.query(Notification).filter(
        Notification.user_id == user.id, Notification.is_read == False  # noqa: E712
    ).update({"is_read": True}, synchronize_session=False)
    _expire_loaded(db)
    db.commit()
    return count


# ── Email ─────────────────────────────────────────────────────────────────────

def _send_email_notification(
    user_id: UUID,
    subject: str,
    body: str,
    db: Session,
) -> None:
    """
    Send email via SendGrid.
    No-op in dev mode if SENDGRID_API_KEY is not configured.
    """
    if not settings.sendgrid_api_key:
        logger.debug(f"Email skipped (no SendGrid key): {subject}")
        return

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.email:
        return

    try:
        import sendgrid
        from sendgrid.helpers.mail import Mail

        sg = sendgrid.SendGridAPIClient(api_key=settings.sendgrid_api_key)
        message = Mail(
            from_email=(settings.email_from, settings.email_from_name),
            to_emails=user.email,
            subject=f"{settings.app_name}: {subject}",
            plain_text_content=body,
            html_content=_build_email_html(user.full_name, subject, body),
        )
        sg.send(message)
        logger.info(f"Email sent to {user.email}: {subject}")
    except Exception as e:
        raise RuntimeError(f"SendGrid error: {e}")


def _build_email_html(full_name: str, subject: str, body: str) -> str:
    """Simple HTML email template."""
    return f"""
<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: auto; padding: 20px;">
    <div style="background: #2563eb; padding: 20px; border-radius: 8px 8px 0 0;">
        <h1 style="color: white; margin: 0;">{settings.app_name}</h1>
    </div>
    <div style="background: #fff; padding: 24px; border: 1px solid #e5e7eb; border-radius: 0 0 8px 8px;">
        <p>Hi {full_name},</p>
        <h2 style="color: #1f2937;">{subject}</h2>
        <p style="color: #4b5563; line-height: 1.6;">{body}</p>
        <p><a href="{settings.frontend_url}/notifications">Open your notifications</a></p>
        <hr style="border: none; border-top: 1px solid #e5e7eb; margin: 24px 0;">
        <p style="color: #9ca3af; font-size: 12px;">
            You received this email from {settings.app_name}. To manage notifications, visit your account settings.
        </p>
    </div>
</body>
</html>
"""
