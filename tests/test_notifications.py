import pytest

from app.core.exceptions import AlreadyProcessed, NotFound
from app.services import catalog_service, matching_service, notification_service
from app.services.notification_service import notify


def _titles(page):
    return [n.title for n in page]


def test_list_counts_unread(db, student):
    notify(db, student.id, "tutor_applied", "One", "first", send_email=False)
    notify(db, student.id, "tutor_applied", "Two", "second", send_email=False)
    db.commit()

    page, unread, total = notification_service.list_for_user(db, student)
    assert total == 2
    assert unread == 2

    notification_service.mark_read(db, student, page[0].id)
    page, unread, total = notification_service.list_for_user(db, student, unread_only=True)
    assert unread == 1
    assert len(page) == 1


def test_mark_all_read(db, student):
    for i in range(3):
        notify(db, student.id, "tutor_applied", f"N{i}", "body", send_email=False)
    db.commit()

    assert notification_service.mark_all_read(db, student) == 3
    _, unread, total = notification_service.list_for_user(db, student)
    assert unread == 0
    assert total == 3


def test_pagination(db, student):
    for i in range(5):
        notify(db, student.id, "tutor_applied", f"N{i}", "body", send_email=False)
    db.commit()

    page, _, total = notification_service.list_for_user(db, student, skip=3, limit=20)
    assert total == 5
    assert len(page) == 2


def test_cannot_read_someone_elses(db, student, other_student):
    n = notify(db, student.id, "tutor_applied", "Mine", "body", send_email=False)
    db.commit()
    with pytest.raises(NotFound):
        notification_service.mark_read(db, other_student, n.id)


def test_actioned_applications_are_hidden(db, admin, tutor, tutor_user, open_course):
    matching_service.apply(db, tutor_user, open_course.id)
    page, _, _ = notification_service.list_for_user(db, admin)
    assert len(page) == 1
    held = page[0]

    matching_service.reject(db, open_course.id, tutor.id)
    assert held.action_status == "dismissed"
    assert held.is_read

    page, unread, total = notification_service.list_for_user(db, admin)
    assert total == 0
    assert unread == 0


def test_resolving_marks_read(db, student):
    n = notify(db, student.id, "tutor_applied", "Hello", "m", send_email=False)
    db.commit()
    page, unread, _ = notification_service.list_for_user(db, student)
    assert unread == 1

    matching_service.resolve_notification(db, student, n.id, "dismiss")

    page, unread, total = notification_service.list_for_user(db, student)
    assert total == 1
    assert unread == 0
    assert page[0].is_read


def test_duplicates_collapse_to_newest(db, admin, tutor, open_course):
    payload = {"course_id": open_course.id, "tutor_id": tutor.id}
    notify(db, admin.id, "course_assigned_admin", "Older", "m", payload=payload, send_email=False)
    notify(db, admin.id, "course_assigned_admin", "Newer", "m", payload=payload, send_email=False)
    db.commit()

    page, _, total = notification_service.list_for_user(db, admin)
    assert total == 1


def test_notifications_for_deleted_course_are_hidden(db, tutor_user, tutor, open_course):
    notify(
        db, tutor_user.id, "course_match", "Match", "m",
        payload={"course_id": open_course.id, "tutor_id": tutor.id}, send_email=False,
    )
    notify(db, tutor_user.id, "tutor_applied", "Unrelated", "m", send_email=False)
    db.commit()

    catalog_service.delete_course(db, open_course.id)

    page, _, total = notification_service.list_for_user(db, tutor_user)
    assert _titles(page) == ["Unrelated"]


def test_dismiss_is_once_only(db, student):
    n = notify(db, student.id, "tutor_applied", "Hello", "m", send_email=False)
    db.commit()

    resolved = matching_service.resolve_notification(db, student, n.id, "dismiss")
    assert resolved.action_status == "dismissed"
    assert resolved.resolved_at is not None

    with pytest.raises(AlreadyProcessed):
        matching_service.resolve_notification(db, student, n.id, "dismiss")


def test_dedupe_returns_pending_row(db, tutor_user, tutor, open_course):
    payload = {"course_id": open_course.id, "tutor_id": tutor.id}
    first = notify(db, tutor_user.id, "course_match", "A", "m", payload=payload, dedupe=True)
    second = notify(db, tutor_user.id, "course_match", "B", "m", payload=payload, dedupe=True)
    assert first.id == second.id


def test_email_failure_does_not_block(db, admin, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("SendGrid error: down")

    monkeypatch.setattr(notification_service, "_send_email_notification", boom)
    n = notify(db, admin.id, "tutor_application", "Application", "m")
    db.commit()
    assert n.id is not None
