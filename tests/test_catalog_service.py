import uuid
from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import NotFound, ValidationError
from app.models.course import Course
from app.models.notification import Notification
from app.services import catalog_service, matching_service
from app.services.cv_matching import KeywordCVMatcher
from conftest import make_course


# ── Categories ────────────────────────────────────────────────────────────────

def test_category_names_are_unique(db, category):
    with pytest.raises(ValidationError):
        catalog_service.create_category(db, "Mathematics")

    catalog_service.create_category(db, "Art")
    assert [c.name for c in catalog_service.list_categories(db)] == ["Art", "Mathematics"]


# ── Courses ───────────────────────────────────────────────────────────────────

def test_course_without_instructor_is_never_published(db, category):
    course = catalog_service.create_course(db, {
        "title": "Chemistry", "category_id": category.id, "price": Decimal("20"), "is_published": True,
    })
    assert course.instructor_id is None
    assert not course.is_published


def test_course_with_instructor_joins_tutor_courses(db, category, tutor):
    course = catalog_service.create_course(db, {
        "title": "Trigonometry", "category_id": category.id, "instructor_id": tutor.id, "is_published": True,
    })
    assert course.is_published
    db.refresh(tutor)
    assert course in tutor.courses


def test_new_unassigned_course_is_pushed_to_matching_tutors(db, tutor_user, course, category):
    catalog_service.create_course(db, {"title": "Number Theory", "category_id": category.id})

    matches = db.query(Notification).filter(
        Notification.user_id == tutor_user.id,
        Notification.notification_type == "course_match",
    ).all()
    assert len(matches) == 1
    assert matches[0].payload["course_title"] == "Number Theory"


def test_unknown_category(db):
    with pytest.raises(NotFound):
        catalog_service.create_course(db, {"title": "X", "category_id": uuid.uuid4()})


def test_prerequisites_must_exist(db, course):
    missing = uuid.uuid4()
    with pytest.raises(NotFound) as exc:
        catalog_service.create_course(db, {"title": "Algebra II", "prerequisite_ids": [course.id, missing]})
    assert exc.value.extra["missing"] == [str(missing)]


def test_course_cannot_require_itself(db, course):
    with pytest.raises(ValidationError):
        catalog_service.update_course(db, course.id, {"prerequisite_ids": [course.id]})


def test_prerequisites_are_stored(db, course):
    advanced = catalog_service.create_course(db, {"title": "Algebra II", "prerequisite_ids": [course.id]})
    assert [p.id for p in advanced.prerequisites] == [course.id]


def test_reassigning_instructor_keeps_tutor_courses_in_sync(db, course, tutor, second_tutor):
    catalog_service.update_course(db, course.id, {"instructor_id": second_tutor.id})

    db.refresh(tutor)
    db.refresh(second_tutor)
    assert course not in tutor.courses
    assert course in second_tutor.courses
    assert course.instructor_id == second_tutor.id


def test_assigning_open_course_publishes_it(db, open_course, tutor):
    updated = catalog_service.update_course(db, open_course.id, {"instructor_id": tutor.id})
    assert updated.is_published


def test_clearing_instructor_unpublishes(db, course, tutor):
    updated = catalog_service.update_course(db, course.id, {"instructor_id": None})

    assert updated.instructor_id is None
    assert not updated.is_published
    db.refresh(tutor)
    assert updated not in tutor.courses


def test_admin_assignment_retires_pending_applications(
    db, admin, tutor_user, second_tutor_user, tutor, second_tutor, open_course
):
    matching_service.apply(db, tutor_user, open_course.id)
    matching_service.apply(db, second_tutor_user, open_course.id)

    catalog_service.update_course(db, open_course.id, {"instructor_id": tutor.id})

    assert matching_service.list_pending_applications(db) == []
    statuses = {
        n.tutor_id: n.action_status
        for n in db.query(Notification).filter(Notification.notification_type == "tutor_application")
    }
    assert statuses == {tutor.id: "applied", second_tutor.id: "dismissed"}

    def elsewhere(user):
        return db.query(Notification).filter(
            Notification.user_id == user.id,
            Notification.notification_type == "course_assigned_elsewhere",
        ).count()

    assert elsewhere(second_tutor_user) == 1
    assert elsewhere(tutor_user) == 0


def test_publishing_unassigned_course_has_no_effect(db, open_course):
    updated = catalog_service.update_course(db, open_course.id, {"is_published": True})
    assert not updated.is_published


def test_list_courses_filters(db, course, open_course):
    assert [c.id for c in catalog_service.list_courses(db)] == [course.id]
    unassigned = catalog_service.list_courses(db, published_only=False, unassigned=True)
    assert [c.id for c in unassigned] == [open_course.id]
    assert len(catalog_service.list_courses(db, published_only=False)) == 2


def test_delete_course_clears_links(db, course, tutor):
    advanced = catalog_service.create_course(db, {"title": "Algebra II", "prerequisite_ids": [course.id]})

    catalog_service.delete_course(db, course.id)

    assert db.query(Course).filter(Course.id == course.id).first() is None
    db.refresh(advanced)
    db.refresh(tutor)
    assert advanced.prerequisites == []
    assert tutor.courses == []


# ── Tutors ────────────────────────────────────────────────────────────────────

def test_availability_is_validated_and_sorted(db, tutor):
    day = date(2026, 11, 2)
    catalog_service.set_availability(db, tutor, [
        {"date": day, "start_minute": 600, "end_minute": 660},
        {"date": day, "start_minute": 540, "end_minute": 600},
    ])
    assert [s.start_minute for s in tutor.availability] == [540, 600]

    with pytest.raises(ValidationError):
        catalog_service.set_availability(db, tutor, [{"date": day, "start_minute": 600, "end_minute": 600}])
    with pytest.raises(ValidationError):
        catalog_service.set_availability(db, tutor, [{"date": day, "start_minute": 1400, "end_minute": 1441}])


def test_upsert_profile_only_touches_given_fields(db, tutor_user, tutor):
    profile = catalog_service.upsert_tutor_profile(db, tutor_user, {"bio": "New bio", "hourly_rate": None})
    assert profile.bio == "New bio"
    assert profile.experience_years == 3


def test_suggest_courses_from_cv(db, course, category):
    make_course(db, "Spanish Conversation", category=None)

    suggested = catalog_service.suggest_courses(
        db, KeywordCVMatcher(), "Ten years teaching algebra and mathematics to teenagers."
    )
    assert [c.id for c in suggested] == [course.id]

    with pytest.raises(ValidationError):
        catalog_service.suggest_courses(db, KeywordCVMatcher(), "   ")
