import pytest
from sqlalchemy import event

from app.core.exceptions import Forbidden, ValidationError
from app.db.session import SessionLocal
from app.models.enrollment import Enrollment
from app.services import enrollment_service, resource_service
from app.services.enrollment_service import compute_progress, round_half_up
from conftest import make_booking, make_course


@pytest.mark.parametrize("n,d,expected", [
    (1, 2, 1),     # 0.5 → 1
    (3, 2, 2),     # 1.5 → 2
    (1, 3, 0),
    (2, 3, 1),
    (350, 8, 44),  # 43.75
    (0, 5, 0),
])
def test_round_half_up(n, d, expected):
    assert round_half_up(n, d) == expected


@pytest.mark.parametrize("done,total,graded,expected", [
    (0, 0, False, 0),
    (0, 0, True, 30),
    (0, 4, False, 0),
    (1, 4, False, 18),    # 17.5 → 18
    (2, 4, True, 65),
    (4, 4, False, 70),
    (4, 4, True, 100),
    (9, 4, True, 100),    # more done than total is clamped
    (1, 3, True, 53),     # 23.33 + 30
])
def test_compute_progress(done, total, graded, expected):
    assert compute_progress(done, total, graded) == expected


@pytest.fixture
def enrollment(db, student, course):
    booking = make_booking(db, student, course, status="confirmed")
    return enrollment_service.get_or_create_for_booking(db, booking)


def add_resources(db, tutor_user, course, count):
    return [
        str(resource_service.add_resource(
            db, tutor_user, course.id, f"Chapter {i + 1}", f"https://example.com/ch{i + 1}"
        ).id)
        for i in range(count)
    ]


def test_update_progress_dedupes_resources(db, student, tutor_user, course, enrollment):
    ids = add_resources(db, tutor_user, course, 4)
    updated = enrollment_service.update_progress(db, student, enrollment.id, [ids[0], ids[1], ids[0]])

    assert updated.completed_resource_ids == [ids[0], ids[1]]
    assert updated.total_resources == 4
    assert updated.progress == 35
    assert updated.status == "active"


def test_full_progress_completes_enrollment(db, student, tutor_user, course, enrollment):
    from app.models.assignment import Assignment

    ids = add_resources(db, tutor_user, course, 2)
    db.add(Assignment(
        booking_id=enrollment.booking_id,
        course_id=enrollment.course_id,
        student_id=student.id,
        attempt_number=1,
        questions=[],
        status="graded",
        numeric_grade=80,
    ))
    db.commit()

    updated = enrollment_service.update_progress(db, student, enrollment.id, ids)
    assert updated.progress == 100
    assert updated.status == "completed"
    assert updated.completed_at is not None


def test_resource_total_is_counted_not_reported(db, student, enrollment):
    # No resources exist, so nothing the student sends can count
    with pytest.raises(ValidationError) as exc:
        enrollment_service.update_progress(db, student, enrollment.id, ["x"])
    assert exc.value.extra["unknown"] == ["x"]

    db.refresh(enrollment)
    assert enrollment.progress == 0
    assert enrollment.completed_resource_ids == []


def test_resources_of_another_course_are_rejected(db, student, tutor, tutor_user, enrollment, category):
    other = make_course(db, "Calculus", category=category, instructor=tutor)
    foreign = add_resources(db, tutor_user, other, 1)

    with pytest.raises(ValidationError):
        enrollment_service.update_progress(db, student, enrollment.id, foreign)


def test_new_resource_lowers_progress_of_active_enrollments(db, student, tutor_user, course, enrollment):
    ids = add_resources(db, tutor_user, course, 2)
    enrollment_service.update_progress(db, student, enrollment.id, ids)
    assert enrollment.progress == 70

    add_resources(db, tutor_user, course, 1)
    db.refresh(enrollment)
    assert enrollment.total_resources == 3
    assert enrollment.progress == 47    # 46.67


def test_other_student_cannot_update(db, other_student, enrollment):
    with pytest.raises(Forbidden):
        enrollment_service.update_progress(db, other_student, enrollment.id, [])


def test_admin_can_read_but_not_update(db, admin, enrollment):
    assert enrollment_service.get_for_user(db, admin, enrollment.id).id == enrollment.id
    with pytest.raises(Forbidden):
        enrollment_service.update_progress(db, admin, enrollment.id, [])


# ── Creation race ─────────────────────────────────────────────────────────────

def test_concurrent_insert_is_reused(db, student, course):
    booking = make_booking(db, student, course, status="confirmed")
    inserted = {}

    def insert_first(session, flush_context, instances):
        other = SessionLocal()
        try:
            row = Enrollment(
                student_id=booking.student_id,
                course_id=booking.course_id,
                booking_id=booking.id,
                status="active",
                progress=0,
                completed_resource_ids=[],
                total_resources=0,
            )
            other.add(row)
            other.commit()
            inserted["id"] = row.id
        finally:
            other.close()

    event.listen(db, "before_flush", insert_first, once=True)
    enrollment = enrollment_service.get_or_create_for_booking(db, booking)

    assert enrollment.id == inserted["id"]
    assert db.query(Enrollment).filter(Enrollment.booking_id == booking.id).count() == 1
