"""Catalog service: pure business logic, no FastAPI imports.

Handles course CRUD, content item management, the public catalog and
the two navigation queries over an enrollment: next content and resume.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.payloads import validate_payload
from app.exceptions import (
    ContentNotFoundError,
    CourseNotFoundError,
    NoMoreContentError,
    NoProgressFoundError,
    NotCourseAuthorError,
)
from app.models.content_item import ContentItem
from app.models.content_progress import ContentProgress
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.enums import ContentType, CourseLevel, CourseSortField, SortOrder

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    CourseSortField.CREATED_AT: Course.created_at,
    CourseSortField.TITLE: Course.title,
    CourseSortField.PRICE: Course.price,
    CourseSortField.DURATION_MINS: Course.duration_mins,
}


# ---------------------------------------------------------------------------
# Course lookups
# ---------------------------------------------------------------------------


async def get_course(db: AsyncSession, course_id: UUID) -> Course:
    """Fetch a course regardless of publication state."""
    course = await db.get(Course, course_id)
    if course is None:
        raise CourseNotFoundError(str(course_id))
    return course


async def get_visible_course(
    db: AsyncSession, course_id: UUID, viewer_id: UUID | None
) -> Course:
    """Fetch a course the viewer may see. Drafts are visible to their author only."""
    course = await get_course(db, course_id)
    if not course.is_published and course.author_id != viewer_id:
        raise CourseNotFoundError(str(course_id))
    return course


async def get_authored_course(db: AsyncSession, author_id: UUID, course_id: UUID) -> Course:
    course = await get_course(db, course_id)
    if course.author_id != author_id:
        raise NotCourseAuthorError()
    return course


# ---------------------------------------------------------------------------
# Course CRUD
# ---------------------------------------------------------------------------


async def create_course(
    db: AsyncSession,
    author_id: UUID,
    *,
    title: str,
    description: str | None = None,
    featured_image: str | None = None,
    price: Decimal = Decimal("0"),
    currency: str = "USD",
    level: CourseLevel = CourseLevel.BEGINNER,
    duration_mins: int = 0,
    language: str = "English",
    category: str | None = None,
    tags: list[str] | None = None,
) -> Course:
    course = Course(
        author_id=author_id,
        title=title,
        description=description,
        featured_image=featured_image,
        price=price,
        currency=currency,
        level=level,
        duration_mins=duration_mins,
        language=language,
        category=category,
        tags=tags or [],
        is_published=False,
    )
    db.add(course)
    await db.flush()
    await db.refresh(course)
    return course


async def update_course(
    db: AsyncSession, author_id: UUID, course_id: UUID, updates: dict
) -> Course:
    course = await get_authored_course(db, author_id, course_id)
    for field, value in updates.items():
        setattr(course, field, value)
    await db.flush()
    await db.refresh(course)
    return course


async def publish_course(db: AsyncSession, author_id: UUID, course_id: UUID) -> Course:
    course = await get_authored_course(db, author_id, course_id)
    course.is_published = True
    await db.flush()
    await db.refresh(course)
    logger.info("Course %s published by %s", course_id, author_id)
    return course


async def delete_course(db: AsyncSession, author_id: UUID, course_id: UUID) -> None:
    """Delete a course. Content, enrollments, progress, certificates and reviews cascade."""
    course = await get_authored_course(db, author_id, course_id)
    await db.delete(course)
    await db.flush()
    logger.info("Course %s deleted by %s", course_id, author_id)


async def list_courses(
    db: AsyncSession,
    *,
    category: str | None = None,
    level: CourseLevel | None = None,
    search: str | None = None,
    min_price: Decimal | None = None,
    max_price: Decimal | None = None,
    sort: CourseSortField = CourseSortField.CREATED_AT,
    order: SortOrder = SortOrder.DESC,
    offset: int = 0,
    limit: int = 10,
) -> tuple[list[Course], int]:
    """Published courses, newest first by default. Returns (page, total)."""
    conditions = [Course.is_published.is_(True)]
    if category:
        conditions.append(Course.category == category)
    if level is not None:
        conditions.append(Course.level == level)
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(Course.title.ilike(pattern), Course.description.ilike(pattern)))
    if min_price is not None:
        conditions.append(Course.price >= min_price)
    if max_price is not None:
        conditions.append(Course.price <= max_price)

    total = await db.scalar(select(func.count()).select_from(Course).where(*conditions))
    sort_column = _SORT_COLUMNS[CourseSortField(sort)]
    stmt = (
        select(Course)
        .where(*conditions)
        .order_by(sort_column.asc() if order == SortOrder.ASC else sort_column.desc(), Course.course_id)
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all()), total or 0


async def get_course_detail(
    db: AsyncSession, course_id: UUID, viewer_id: UUID | None
) -> dict:
    """Course with its outline, filtered for the viewer.

    The author and enrolled learners see every item; anyone else only
    the preview items.
    """
    course = await get_visible_course(db, course_id, viewer_id)
    is_author = viewer_id is not None and course.author_id == viewer_id
    is_enrolled = False
    if viewer_id is not None and not is_author:
        is_enrolled = bool(
            await db.scalar(
                select(func.count()).where(
                    Enrollment.user_id == viewer_id,
                    Enrollment.course_id == course_id,
                )
            )
        )
    contents = await list_course_contents(db, course_id)
    visible = contents if (is_author or is_enrolled) else [c for c in contents if c.is_preview]
    return {
        "course": course,
        "contents": visible,
        "total_contents": len(contents),
        "is_enrolled": is_enrolled,
        "is_author": is_author,
    }


# ---------------------------------------------------------------------------
# Content items
# ---------------------------------------------------------------------------


async def list_course_contents(db: AsyncSession, course_id: UUID) -> list[ContentItem]:
    """All items of a course in delivery order."""
    stmt = (
        select(ContentItem)
        .where(ContentItem.course_id == course_id)
        .order_by(ContentItem.order, ContentItem.content_id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_course_contents(db: AsyncSession, course_id: UUID) -> int:
    total = await db.scalar(
        select(func.count()).select_from(ContentItem).where(ContentItem.course_id == course_id)
    )
    return total or 0


async def refresh_course_enrollments(db: AsyncSession, course_id: UUID) -> None:
    """Recompute the stored percentage of every enrollment of the course.

    Runs whenever the set of items changes. A course left without content
    keeps the stored values.
    """
    total = await count_course_contents(db, course_id)
    if not total:
        return
    completed_stmt = (
        select(ContentProgress.enrollment_id, func.count())
        .join(ContentItem, ContentItem.content_id == ContentProgress.content_id)
        .where(ContentItem.course_id == course_id, ContentProgress.is_completed.is_(True))
        .group_by(ContentProgress.enrollment_id)
    )
    completed = dict((await db.execute(completed_stmt)).all())
    result = await db.execute(select(Enrollment).where(Enrollment.course_id == course_id))
    for enrollment in result.scalars().all():
        done = completed.get(enrollment.enrollment_id, 0)
        enrollment.progress = max(0, min(100, done * 100 // total))
    await db.flush()


async def get_course_content(db: AsyncSession, course_id: UUID, content_id: UUID) -> ContentItem:
    """Fetch a content item, scoped to its course."""
    item = await db.get(ContentItem, content_id)
    if item is None or item.course_id != course_id:
        raise ContentNotFoundError(str(content_id))
    return item


async def list_contents_for_author(
    db: AsyncSession, author_id: UUID, course_id: UUID
) -> list[ContentItem]:
    await get_authored_course(db, author_id, course_id)
    return await list_course_contents(db, course_id)


async def add_content(
    db: AsyncSession,
    author_id: UUID,
    course_id: UUID,
    *,
    title: str,
    content_type: ContentType,
    data: dict | None,
    duration_mins: int = 0,
    order: int | None = None,
    is_preview: bool = False,
) -> ContentItem:
    await get_authored_course(db, author_id, course_id)
    payload = validate_payload(content_type, data)
    if order is None:
        last = await db.scalar(
            select(func.max(ContentItem.order)).where(ContentItem.course_id == course_id)
        )
        order = (last or 0) + 1
    item = ContentItem(
        course_id=course_id,
        title=title,
        content_type=content_type,
        data=payload,
        duration_mins=duration_mins,
        order=order,
        is_preview=is_preview,
    )
    db.add(item)
    await db.flush()
    await refresh_course_enrollments(db, course_id)
    await db.refresh(item)
    return item


async def update_content(
    db: AsyncSession,
    author_id: UUID,
    course_id: UUID,
    content_id: UUID,
    updates: dict,
) -> ContentItem:
    await get_authored_course(db, author_id, course_id)
    item = await get_course_content(db, course_id, content_id)

    # A type change re-validates the stored payload unless a new one is supplied
    if "content_type" in updates or "data" in updates:
        content_type = updates.get("content_type") or item.content_type
        data = updates["data"] if updates.get("data") is not None else item.data
        updates["content_type"] = content_type
        updates["data"] = validate_payload(content_type, data)

    for field, value in updates.items():
        setattr(item, field, value)
    await db.flush()
    await db.refresh(item)
    return item


async def delete_content(
    db: AsyncSession, author_id: UUID, course_id: UUID, content_id: UUID
) -> None:
    """Delete a content item. Its progress rows cascade and every enrollment
    percentage of the course is recomputed."""
    await get_authored_course(db, author_id, course_id)
    item = await get_course_content(db, course_id, content_id)
    await db.delete(item)
    await db.flush()
    await refresh_course_enrollments(db, course_id)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


async def next_content(db: AsyncSession, enrollment: Enrollment) -> ContentItem:
    """First item in delivery order without a completed progress row.

    Raises ``NoMoreContentError`` when every item is completed, or the course
    has no content.
    """
    stmt = (
        select(ContentItem)
        .outerjoin(
            ContentProgress,
            and_(
                ContentProgress.content_id == ContentItem.content_id,
                ContentProgress.enrollment_id == enrollment.enrollment_id,
            ),
        )
        .where(
            ContentItem.course_id == enrollment.course_id,
            or_(
                ContentProgress.progress_id.is_(None),
                ContentProgress.is_completed.is_(False),
            ),
        )
        .order_by(ContentItem.order, ContentItem.content_id)
        .limit(1)
    )
    result = await db.execute(stmt)
    item = result.scalar_one_or_none()
    if item is None:
        raise NoMoreContentError()
    return item


async def resume_position(
    db: AsyncSession, enrollment: Enrollment
) -> tuple[ContentItem, ContentProgress]:
    """Item and progress row the learner touched last.

    Raises ``NoProgressFoundError`` before any progress was recorded.
    """
    stmt = (
        select(ContentItem, ContentProgress)
        .join(ContentProgress, ContentProgress.content_id == ContentItem.content_id)
        .where(ContentProgress.enrollment_id == enrollment.enrollment_id)
        .order_by(ContentProgress.updated_at.desc(), ContentProgress.progress_id.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    row = result.first()
    if row is None:
        raise NoProgressFoundError()
    return row[0], row[1]
