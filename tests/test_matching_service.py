import pytest

from app.core.exceptions import (
    AlreadyProcessed,
    CourseAlreadyAssigned,
    Forbidden,
    NotFound,
    ValidationError,
)
from app.models.notification import Notification
from app.services import matching_service, notification_service
from conftest import make_course


def _of_type(db, user, notification_type):
    return db.query(Notification).filter(
        Notification.user_id == user.id,
        Notification.notification_type == notification_type,
    ).all()


@pytest.fixture
def both_applied(db, admin, tutor_user, second_tutor_user, open_course):
    matching_service.apply(db, tutor_user, open_course.id)
    matching_service.apply(db, second_tutor_user, open_course.id)
    return open_course


# ── Apply ─────────────────────────────────────────────────────────────────────

def test_apply_notifies_admins_and_tutor(db, admin, tutor_user, tutor, open_course):
    course, created = matching_service.apply(db, tutor_user, open_course.id)

    assert created
    applications = _of_type(db, admin, "tutor_application")
    assert len(applications) == 1
    assert applications[0].course_id == open_course.id
    assert applications[0].tutor_id == tutor.id
    assert applications[0].payload["tutor_name"] == "Tina Tutor"
    assert len(_of_type(db, tutor_user, "tutor_applied")) == 1


def test_apply_twice_while_pending_does_not_duplicate(db, admin, tutor_user, open_course):
    matching_service.apply(db, tutor_user, open_course.id)
    _, created = matching_service.apply(db, tutor_user, open_course.id)

    assert not created
    assert len(_of_type(db, admin, "tutor_application")) == 1


def test_apply_to_own_course_is_invalid(db, tutor_user, course):
    with pytest.raises(ValidationError):
        matching_service.apply(db, tutor_user, course.id)


def test_pending_applications_grouped_by_course(db, both_applied, tutor, second_tutor):
    pending = matching_service.list_pending_applications(db)

    assert len(pending) == 1
    assert pending[0]["course_id"] == both_applied.id
    assert not pending[0]["assigned"]
    assert {a["tutor_id"] for a in pending[0]["applicants"]} == {tutor.id, second_tutor.id}


# ── Accept ────────────────────────────────────────────────────────────────────

def test_accept_assigns_and_notifies_everyone(
    db, admin, tutor_user, second_tutor_user, tutor, second_tutor, both_applied
):
    course = matching_service.accept(db, both_applied.id, tutor.id)

    assert course.instructor_id == tutor.id
    assert course.is_published
    db.refresh(tutor)
    assert course in tutor.courses

    assert len(_of_type(db, tutor_user, "course_accepted")) == 1
    assert len(_of_type(db, second_tutor_user, "course_assigned_elsewhere")) == 1
    assert len(_of_type(db, admin, "course_assigned_admin")) == 1

    statuses = {
        n.tutor_id: n.action_status for n in _of_type(db, admin, "tutor_application")
    }
    assert statuses == {tutor.id: "applied", second_tutor.id: "dismissed"}
    assert matching_service.list_pending_applications(db) == []


def test_second_accept_loses(db, second_tutor_user, tutor, second_tutor, both_applied):
    matching_service.accept(db, both_applied.id, tutor.id)

    with pytest.raises(CourseAlreadyAssigned):
        matching_service.accept(db, both_applied.id, second_tutor.id)

    db.refresh(both_applied)
    assert both_applied.instructor_id == tutor.id


def test_accept_after_assignment_retires_late_application(
    db, admin, second_tutor_user, second_tutor, tutor, both_applied
):
    matching_service.accept(db, both_applied.id, tutor.id)
    # Applied again after the course was taken
    matching_service.apply(db, second_tutor_user, both_applied.id)

    with pytest.raises(CourseAlreadyAssigned):
        matching_service.accept(db, both_applied.id, second_tutor.id)

    pending = db.query(Notification).filter(
        Notification.notification_type == "tutor_application",
        Notification.tutor_id == second_tutor.id,
        Notification.action_status == "none",
    ).count()
    assert pending == 0
    assert len(_of_type(db, second_tutor_user, "course_assigned_elsewhere")) == 2


# ── Reject ────────────────────────────────────────────────────────────────────

def test_reject_dismisses_once(db, admin, tutor_user, tutor, both_applied):
    matching_service.reject(db, both_applied.id, tutor.id)

    assert len(_of_type(db, tutor_user, "course_rejected")) == 1
    db.refresh(both_applied)
    assert both_applied.instructor_id is None

    with pytest.raises(AlreadyProcessed):
        matching_service.reject(db, both_applied.id, tutor.id)


# ── Course-match push ─────────────────────────────────────────────────────────

def test_push_course_match_reaches_tutors_in_category(db, tutor_user, second_tutor_user, course, category):
    # tutor teaches Algebra I in Mathematics; second tutor teaches nothing yet
    new_course = make_course(db, "Calculus", category=category)

    assert matching_service.push_course_match(db, new_course) == 1
    assert matching_service.push_course_match(db, new_course) == 1
    db.commit()

    matches = _of_type(db, tutor_user, "course_match")
    assert len(matches) == 1
    assert _of_type(db, second_tutor_user, "course_match") == []


def test_push_course_match_skips_assigned_course(db, course):
    assert matching_service.push_course_match(db, course) == 0


def test_apply_from_course_match(db, admin, tutor_user, course, category):
    new_course = make_course(db, "Statistics", category=category)
    matching_service.push_course_match(db, new_course)
    db.commit()
    match = _of_type(db, tutor_user, "course_match")[0]

    n = matching_service.resolve_notification(db, tutor_user, match.id, "apply")

    assert n.action_status == "applied"
    assert len(_of_type(db, admin, "tutor_application")) == 1

    with pytest.raises(AlreadyProcessed):
        matching_service.resolve_notification(db, tutor_user, match.id, "apply")


# ── Resolve ───────────────────────────────────────────────────────────────────

def test_admin_resolves_application_by_accepting(db, admin, tutor, both_applied):
    application = [
        n for n in _of_type(db, admin, "tutor_application") if n.tutor_id == tutor.id
    ][0]

    n = matching_service.resolve_notification(db, admin, application.id, "accept")

    assert n.action_status == "applied"
    db.refresh(both_applied)
    assert both_applied.instructor_id == tutor.id


def test_tutor_cannot_accept_application(db, admin, tutor_user, both_applied):
    application = _of_type(db, admin, "tutor_application")[0]
    # Not the recipient, so it is not even visible
    with pytest.raises(NotFound):
        matching_service.resolve_notification(db, tutor_user, application.id, "accept")


def test_accept_requires_tutor_application(db, tutor_user, both_applied):
    applied = _of_type(db, tutor_user, "tutor_applied")[0]
    with pytest.raises(ValidationError):
        matching_service.resolve_notification(db, tutor_user, applied.id, "accept")


def test_non_admin_recipient_cannot_decide(db, tutor_user, tutor, open_course):
    # An application addressed to a tutor account is still an admin-only decision
    n = notification_service.notify(
        db, tutor_user.id, "tutor_application", "t", "m",
        payload={"course_id": open_course.id, "tutor_id": tutor.id}, send_email=False,
    )
    db.commit()
    with pytest.raises(Forbidden):
        matching_service.resolve_notification(db, tutor_user, n.id, "reject")


def test_unknown_decision(db, tutor_user, both_applied):
    applied = _of_type(db, tutor_user, "tutor_applied")[0]
    with pytest.raises(ValidationError):
        matching_service.resolve_notification(db, tutor_user, applied.id, "approve")
