import uuid

import pytest

from app.core.exceptions import NotFound, ValidationError
from app.models.review import Review
from app.services import review_service


def test_resubmitting_overwrites(db, student, tutor, course):
    first = review_service.submit_review(db, student, tutor.id, 3, "Okay", course.id)
    second = review_service.submit_review(db, student, tutor.id, 5, "Great after all", course.id)

    assert first.id == second.id
    assert second.rating == 5
    assert second.comment == "Great after all"
    assert db.query(Review).count() == 1


def test_review_without_course_is_its_own_row(db, student, tutor, course):
    review_service.submit_review(db, student, tutor.id, 4, None, course.id)
    general = review_service.submit_review(db, student, tutor.id, 2)
    again = review_service.submit_review(db, student, tutor.id, 3)

    assert general.id == again.id
    assert general.course_id is None
    assert db.query(Review).count() == 2


@pytest.mark.parametrize("rating", [0, 6, True, "5"])
def test_rating_must_be_one_to_five(db, student, tutor, rating):
    with pytest.raises(ValidationError):
        review_service.submit_review(db, student, tutor.id, rating)


def test_long_comment_rejected(db, student, tutor):
    with pytest.raises(ValidationError):
        review_service.submit_review(db, student, tutor.id, 4, "x" * 2001)


def test_unknown_tutor_or_course(db, student, tutor):
    with pytest.raises(NotFound):
        review_service.submit_review(db, student, uuid.uuid4(), 4)
    with pytest.raises(NotFound):
        review_service.submit_review(db, student, tutor.id, 4, course_id=uuid.uuid4())


def test_tutor_reviews_and_summary(db, student, other_student, tutor, second_tutor):
    review_service.submit_review(db, student, tutor.id, 4)
    review_service.submit_review(db, other_student, tutor.id, 5)
    review_service.submit_review(db, student, second_tutor.id, 1)

    reviews = review_service.list_for_tutor(db, tutor)
    assert {r.reviewer_id for r in reviews} == {student.id, other_student.id}
    assert review_service.rating_summary(db, tutor) == {"count": 2, "average": 4.5}


def test_summary_without_reviews(db, tutor):
    assert review_service.rating_summary(db, tutor) == {"count": 0, "average": None}
