"""Enrollment service: pure business logic, no FastAPI imports.

Owns the (user, course) enrollment lifecycle: enroll, unenroll and the
lookups every enrolled route is gated on.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import AlreadyEnrolledError, CourseNotFoundError, NotEnrolledError
from app.models.content_progress import ContentProgress
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.enums import PaymentStatus

logger = logging.getLogger(__name__)


async def _find_enrollment(
    db: AsyncSession, user_id: UUID, course_id: UUID
) -> Enrollment | None:
    stmt = select(Enrollment).where(
        Enrollment.user_id == user_id,
        Enrollment.course_id == course_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def enroll(db: AsyncSession, user_id: UUID, course_id: UUID) -> Enrollment:
    """Create an enrollment for a published course.

    Free courses are marked paid immediately; priced courses start with a
    pending payment.
    """
    if await _find_enrollment(db, user_id, course_id) is not None:
        raise AlreadyEnrolledError()

    course = await db.get(Course, course_id)
    if course is None or not course.is_published:
        raise CourseNotFoundError(str(course_id))

    enrollment = Enrollment(
        user_id=user_id,
        course_id=course_id,
        progress=0,
        payment_status=PaymentStatus.COMPLETED if course.is_free else PaymentStatus.PENDING,
    )
    db.add(enrollment)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Lost a race against a concurrent enroll for the same pair
        await db.rollback()
        raise AlreadyEnrolledError() from exc
    await db.refresh(enrollment)
    logger.info("User %s enrolled in course %s", user_id, course_id)
    return enrollment


async def unenroll(db: AsyncSession, user_id: UUID, course_id: UUID) -> None:
    """Remove an enrollment and all of its progress rows.

    Both deletes run in the request transaction; certificates are kept.
    """
    enrollment = await _find_enrollment(db, user_id, course_id)
    if enrollment is None:
        raise NotEnrolledError()

    await db.execute(
        delete(ContentProgress).where(ContentProgress.enrollment_id == enrollment.enrollment_id)
    )
    await db.delete(enrollment)
    await db.flush()
    logger.info("User %s unenrolled from course %s", user_id, course_id)


async def get_enrollment(db: AsyncSession, user_id: UUID, course_id: UUID) -> Enrollment:
    enrollment = await _find_enrollment(db, user_id, course_id)
    if enrollment is None:
        raise NotEnrolledError()
    return enrollment


async def get_enrollment_detail(
    db: AsyncSession, user_id: UUID, course_id: UUID
) -> Enrollment:
    """Enrollment with its course loaded."""
    stmt = (
        select(Enrollment)
        .options(selectinload(Enrollment.course))
        .execution_options(populate_existing=True)
        .where(Enrollment.user_id == user_id, Enrollment.course_id == course_id)
    )
    result = await db.execute(stmt)
    enrollment = result.scalar_one_or_none()
    if enrollment is None:
        raise NotEnrolledError()
    return enrollment


async def list_my_enrollments(db: AsyncSession, user_id: UUID) -> list[Enrollment]:
    """All of the user's enrollments with their courses, most recent first."""
    stmt = (
        select(Enrollment)
        .options(selectinload(Enrollment.course))
        .execution_options(populate_existing=True)
        .where(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc(), Enrollment.enrollment_id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
