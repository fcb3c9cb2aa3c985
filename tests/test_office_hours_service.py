import uuid
from datetime import date, datetime, timezone

import pytest

from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.services import catalog_service, enrollment_service, office_hours_service
from conftest import make_booking

DAY = date(2026, 10, 19)


def at(hour, minute=0, day=DAY):
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def office_hours(db, tutor):
    # 09:00-10:00
    return catalog_service.set_availability(
        db, tutor, [{"date": DAY, "start_minute": 540, "end_minute": 600}]
    )


@pytest.fixture
def enrolled(db, student, course):
    booking = make_booking(db, student, course, status="confirmed")
    enrollment_service.get_or_create_for_booking(db, booking)
    return booking


@pytest.mark.parametrize("now,inside", [
    (at(9), True),
    (at(9, 30), True),
    (at(10), True),
    (at(10, 1), False),
    (at(8, 59), False),
    (at(9, 30, day=date(2026, 10, 20)), False),
])
def test_availability_window(db, office_hours, now, inside):
    assert office_hours_service.is_within_availability(office_hours.availability, now) is inside


def test_question_and_reply(db, student, tutor, tutor_user, course, office_hours, enrolled):
    msg = office_hours_service.send_question(
        db, student, tutor.id, course.id, "  How do I factor x^2 - 1?  ", now=at(9, 15)
    )
    assert msg.message == "How do I factor x^2 - 1?"
    assert msg.reply is None

    answered = office_hours_service.reply(db, tutor_user, msg.id, "(x - 1)(x + 1)")
    assert answered.reply == "(x - 1)(x + 1)"
    assert answered.replied_at is not None

    assert [m.id for m in office_hours_service.list_for_tutor(db, tutor_user)] == [msg.id]
    assert [m.id for m in office_hours_service.list_for_student(db, student, course.id)] == [msg.id]
    assert office_hours_service.list_for_student(db, student, uuid.uuid4()) == []


def test_outside_office_hours(db, student, tutor, course, office_hours, enrolled):
    with pytest.raises(ValidationError):
        office_hours_service.send_question(db, student, tutor.id, course.id, "Hi", now=at(11))


def test_not_enrolled(db, other_student, tutor, course, office_hours, enrolled):
    with pytest.raises(Forbidden):
        office_hours_service.send_question(db, other_student, tutor.id, course.id, "Hi", now=at(9))


def test_booking_must_be_with_this_tutor(db, student, second_tutor, course, enrolled):
    with pytest.raises(Forbidden):
        office_hours_service.send_question(db, student, second_tutor.id, course.id, "Hi", now=at(9))


def test_blank_question(db, student, tutor, course, office_hours, enrolled):
    with pytest.raises(ValidationError):
        office_hours_service.send_question(db, student, tutor.id, course.id, "   ", now=at(9))


def test_unknown_tutor(db, student, course, enrolled):
    with pytest.raises(NotFound):
        office_hours_service.send_question(db, student, uuid.uuid4(), course.id, "Hi", now=at(9))


def test_only_the_addressed_tutor_replies(db, student, tutor, second_tutor_user, course, office_hours, enrolled):
    msg = office_hours_service.send_question(db, student, tutor.id, course.id, "Hi", now=at(9))

    with pytest.raises(Forbidden):
        office_hours_service.reply(db, second_tutor_user, msg.id, "Not mine")
    with pytest.raises(NotFound):
        office_hours_service.reply(db, second_tutor_user, uuid.uuid4(), "Hello")


def test_blank_reply(db, student, tutor, tutor_user, course, office_hours, enrolled):
    msg = office_hours_service.send_question(db, student, tutor.id, course.id, "Hi", now=at(9))
    with pytest.raises(ValidationError):
        office_hours_service.reply(db, tutor_user, msg.id, " ")
