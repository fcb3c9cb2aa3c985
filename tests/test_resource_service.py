import pytest

from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.services import resource_service
from conftest import make_course


def test_instructor_adds_and_students_list(db, tutor, tutor_user, course, category):
    first = resource_service.add_resource(db, tutor_user, course.id, " Syllabus ", "https://example.com/s")
    other = make_course(db, "Calculus", category=category, instructor=tutor)
    resource_service.add_resource(db, tutor_user, other.id, "Limits", "https://example.com/l")

    assert first.title == "Syllabus"
    assert first.kind == "link"
    assert [r.id for r in resource_service.list_for_course(db, course.id)] == [first.id]
    assert len(resource_service.list_for_tutor(db, tutor.id)) == 2
    assert [r.id for r in resource_service.list_for_tutor(db, tutor.id, course.id)] == [first.id]


def test_only_the_instructor_can_add(db, second_tutor_user, course):
    with pytest.raises(Forbidden):
        resource_service.add_resource(db, second_tutor_user, course.id, "Notes", "https://example.com")


def test_unassigned_course_takes_no_resources(db, tutor_user, open_course):
    with pytest.raises(Forbidden):
        resource_service.add_resource(db, tutor_user, open_course.id, "Notes", "https://example.com")


@pytest.mark.parametrize("title,url", [("", "https://example.com"), ("Notes", "   ")])
def test_title_and_url_required(db, tutor_user, course, title, url):
    with pytest.raises(ValidationError):
        resource_service.add_resource(db, tutor_user, course.id, title, url)


def test_students_have_no_tutor_profile(db, student, course):
    with pytest.raises(NotFound):
        resource_service.add_resource(db, student, course.id, "Notes", "https://example.com")
