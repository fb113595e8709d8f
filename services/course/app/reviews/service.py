"""Review service: pure business logic, no FastAPI imports.

Only learners who completed a course may review it, once per course.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    CourseNotCompletedError,
    CourseNotFoundError,
    NotReviewOwnerError,
    ReviewAlreadyExistsError,
    ReviewNotFoundError,
)
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.review import Review


async def add_review(
    db: AsyncSession,
    user_id: UUID,
    course_id: UUID,
    *,
    rating: int,
    comment: str = "",
) -> Review:
    course = await db.get(Course, course_id)
    if course is None:
        raise CourseNotFoundError(str(course_id))

    completed = await db.scalar(
        select(Enrollment.enrollment_id).where(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id,
            Enrollment.completed_at.is_not(None),
        )
    )
    if completed is None:
        raise CourseNotCompletedError()

    existing = await db.scalar(
        select(Review.review_id).where(Review.user_id == user_id, Review.course_id == course_id)
    )
    if existing is not None:
        raise ReviewAlreadyExistsError()

    review = Review(user_id=user_id, course_id=course_id, rating=rating, comment=comment)
    db.add(review)
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        raise ReviewAlreadyExistsError() from exc
    await db.refresh(review)
    return review


async def list_reviews(db: AsyncSession, course_id: UUID) -> tuple[list[Review], int, float | None]:
    """Reviews of a course, newest first. Returns (reviews, count, average rating)."""
    course = await db.get(Course, course_id)
    if course is None or not course.is_published:
        raise CourseNotFoundError(str(course_id))

    stmt = (
        select(Review)
        .where(Review.course_id == course_id)
        .order_by(Review.created_at.desc(), Review.review_id)
    )
    result = await db.execute(stmt)
    reviews = list(result.scalars().all())

    average = await db.scalar(select(func.avg(Review.rating)).where(Review.course_id == course_id))
    return reviews, len(reviews), round(float(average), 2) if average is not None else None


async def _get_owned_review(db: AsyncSession, user_id: UUID, review_id: UUID) -> Review:
    review = await db.get(Review, review_id)
    if review is None:
        raise ReviewNotFoundError(str(review_id))
    if review.user_id != user_id:
        raise NotReviewOwnerError()
    return review


async def update_review(
    db: AsyncSession, user_id: UUID, review_id: UUID, updates: dict
) -> Review:
    review = await _get_owned_review(db, user_id, review_id)
    for field, value in updates.items():
        setattr(review, field, value)
    await db.flush()
    await db.refresh(review)
    return review


async def delete_review(db: AsyncSession, user_id: UUID, review_id: UUID) -> None:
    review = await _get_owned_review(db, user_id, review_id)
    await db.delete(review)
    await db.flush()
