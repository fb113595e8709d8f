from uuid import uuid4

import pytest

from app.certificates.service import complete_course
from app.enrollment.service import enroll
from app.exceptions import (
    CourseNotCompletedError,
    CourseNotFoundError,
    NotReviewOwnerError,
    ReviewAlreadyExistsError,
    ReviewNotFoundError,
)
from app.reviews import service


async def _completed_learner(db, course, user_id) -> None:
    enrollment = await enroll(db, user_id, course.course_id)
    await complete_course(db, enrollment, user_id)


@pytest.mark.asyncio
async def test_review_requires_enrollment(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    with pytest.raises(CourseNotCompletedError):
        await service.add_review(db_session, learner_id, course.course_id, rating=5)


@pytest.mark.asyncio
async def test_review_requires_completion(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    await enroll(db_session, learner_id, course.course_id)
    with pytest.raises(CourseNotCompletedError):
        await service.add_review(db_session, learner_id, course.course_id, rating=5)


@pytest.mark.asyncio
async def test_review_missing_course_raises(db_session, learner_id) -> None:
    with pytest.raises(CourseNotFoundError):
        await service.add_review(db_session, learner_id, uuid4(), rating=3)


@pytest.mark.asyncio
async def test_add_review_after_completion(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    await _completed_learner(db_session, course, learner_id)

    review = await service.add_review(
        db_session, learner_id, course.course_id, rating=4, comment="Solid course"
    )
    assert review.rating == 4
    assert review.comment == "Solid course"

    with pytest.raises(ReviewAlreadyExistsError):
        await service.add_review(db_session, learner_id, course.course_id, rating=1)


@pytest.mark.asyncio
async def test_list_reviews_average(db_session, make_course, author_id) -> None:
    course = await make_course(author_id)
    for rating in (5, 4, 4):
        user_id = uuid4()
        await _completed_learner(db_session, course, user_id)
        await service.add_review(db_session, user_id, course.course_id, rating=rating)

    reviews, total, average = await service.list_reviews(db_session, course.course_id)
    assert total == 3
    assert len(reviews) == 3
    assert average == 4.33


@pytest.mark.asyncio
async def test_list_reviews_empty(db_session, make_course, author_id) -> None:
    course = await make_course(author_id)
    reviews, total, average = await service.list_reviews(db_session, course.course_id)
    assert reviews == [] and total == 0 and average is None


@pytest.mark.asyncio
async def test_update_and_delete_own_review(db_session, make_course, author_id, learner_id) -> None:
    course = await make_course(author_id)
    await _completed_learner(db_session, course, learner_id)
    review = await service.add_review(db_session, learner_id, course.course_id, rating=2)

    updated = await service.update_review(db_session, learner_id, review.review_id, {"rating": 5})
    assert updated.rating == 5

    with pytest.raises(NotReviewOwnerError):
        await service.update_review(db_session, uuid4(), review.review_id, {"rating": 1})
    with pytest.raises(NotReviewOwnerError):
        await service.delete_review(db_session, uuid4(), review.review_id)

    await service.delete_review(db_session, learner_id, review.review_id)
    with pytest.raises(ReviewNotFoundError):
        await service.delete_review(db_session, learner_id, review.review_id)
