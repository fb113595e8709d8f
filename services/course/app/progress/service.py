"""Progress service: pure business logic, no FastAPI imports.

Records per-content progress for an enrollment and keeps the enrollment's
denormalized percentage in step with it. Also serves the learner-facing
progress reads (per course, across courses, recent activity, badges).
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.service import get_course_content, list_course_contents
from app.exceptions import NotEnrollmentOwnerError
from app.models.certificate import Certificate
from app.models.content_item import ContentItem
from app.models.content_progress import ContentProgress
from app.models.course import Course
from app.models.enrollment import Enrollment

RECENT_ACTIVITY_LIMIT = 10

# (badge name, description, predicate over the achievement totals)
_BADGES = (
    ("First Course Completed", "Completed your first course", lambda t: t["total_courses_completed"] >= 1),
    ("Learning Enthusiast", "Completed 5 courses", lambda t: t["total_courses_completed"] >= 5),
    ("Dedicated Learner", "Spent over an hour learning", lambda t: t["total_time_spent"] >= 3600),
)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def _get_progress_row(
    db: AsyncSession, enrollment_id: UUID, content_id: UUID
) -> ContentProgress | None:
    stmt = select(ContentProgress).where(
        ContentProgress.enrollment_id == enrollment_id,
        ContentProgress.content_id == content_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def record_progress(
    db: AsyncSession,
    enrollment: Enrollment,
    user_id: UUID,
    content_id: UUID,
    *,
    is_completed: bool,
    time_spent: int = 0,
    last_position: int = 0,
) -> ContentProgress:
    """Upsert the progress row for one content item, then recompute the enrollment.

    ``time_spent`` accumulates across calls; ``last_position`` and
    ``is_completed`` are overwritten. ``completed_at`` is stamped on the
    first completion only and survives a later un-complete.
    """
    if enrollment.user_id != user_id:
        raise NotEnrollmentOwnerError()
    await get_course_content(db, enrollment.course_id, content_id)

    now = datetime.now(timezone.utc)
    progress = await _get_progress_row(db, enrollment.enrollment_id, content_id)
    if progress is None:
        progress = ContentProgress(
            enrollment_id=enrollment.enrollment_id,
            content_id=content_id,
            time_spent=0,
        )
        db.add(progress)

    progress.time_spent = (progress.time_spent or 0) + time_spent
    progress.last_position = last_position
    progress.is_completed = is_completed
    if is_completed and progress.completed_at is None:
        progress.completed_at = now
    progress.updated_at = now
    await db.flush()

    await recompute_enrollment_progress(db, enrollment)
    await db.refresh(progress)
    return progress


async def recompute_enrollment_progress(db: AsyncSession, enrollment: Enrollment) -> int:
    """Set ``enrollment.progress`` to floor(completed * 100 / total).

    A course without content leaves the stored value alone. Reaching 100
    does not complete the enrollment; completion is an explicit action.
    """
    total = await db.scalar(
        select(func.count())
        .select_from(ContentItem)
        .where(ContentItem.course_id == enrollment.course_id)
    )
    if not total:
        return enrollment.progress

    completed = await db.scalar(
        select(func.count())
        .select_from(ContentProgress)
        .join(ContentItem, ContentItem.content_id == ContentProgress.content_id)
        .where(
            ContentProgress.enrollment_id == enrollment.enrollment_id,
            ContentProgress.is_completed.is_(True),
            ContentItem.course_id == enrollment.course_id,
        )
    )
    enrollment.progress = max(0, min(100, (completed or 0) * 100 // total))
    await db.flush()
    return enrollment.progress


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def _progress_by_content(
    db: AsyncSession, enrollment_id: UUID
) -> dict[UUID, ContentProgress]:
    stmt = select(ContentProgress).where(ContentProgress.enrollment_id == enrollment_id)
    result = await db.execute(stmt)
    return {p.content_id: p for p in result.scalars().all()}


async def list_contents_with_progress(
    db: AsyncSession, enrollment: Enrollment
) -> list[tuple[ContentItem, ContentProgress | None]]:
    """Every item of the course in delivery order, paired with its progress row."""
    items = await list_course_contents(db, enrollment.course_id)
    rows = await _progress_by_content(db, enrollment.enrollment_id)
    return [(item, rows.get(item.content_id)) for item in items]


async def get_content_with_progress(
    db: AsyncSession, enrollment: Enrollment, content_id: UUID
) -> tuple[ContentItem, ContentProgress | None]:
    item = await get_course_content(db, enrollment.course_id, content_id)
    progress = await _get_progress_row(db, enrollment.enrollment_id, content_id)
    return item, progress


async def get_course_progress(db: AsyncSession, enrollment: Enrollment) -> dict:
    pairs = await list_contents_with_progress(db, enrollment)
    completed = sum(1 for _, p in pairs if p is not None and p.is_completed)
    return {
        "course_id": enrollment.course_id,
        "progress": enrollment.progress,
        "is_completed": enrollment.is_completed,
        "completed_at": enrollment.completed_at,
        "total_contents": len(pairs),
        "completed_contents": completed,
        "total_time_spent": sum(p.time_spent for _, p in pairs if p is not None),
        "contents": pairs,
    }


async def get_all_courses_progress(db: AsyncSession, user_id: UUID) -> list[dict]:
    """One summary per enrollment of the user, most recently accessed first."""
    totals = (
        select(ContentItem.course_id, func.count().label("total"))
        .group_by(ContentItem.course_id)
        .subquery()
    )
    done = (
        select(ContentProgress.enrollment_id, func.count().label("completed"))
        .where(ContentProgress.is_completed.is_(True))
        .group_by(ContentProgress.enrollment_id)
        .subquery()
    )
    stmt = (
        select(
            Enrollment,
            Course.title,
            func.coalesce(totals.c.total, 0),
            func.coalesce(done.c.completed, 0),
        )
        .join(Course, Course.course_id == Enrollment.course_id)
        .outerjoin(totals, totals.c.course_id == Enrollment.course_id)
        .outerjoin(done, done.c.enrollment_id == Enrollment.enrollment_id)
        .where(Enrollment.user_id == user_id)
        .order_by(
            func.coalesce(Enrollment.last_accessed_at, Enrollment.enrolled_at).desc(),
            Enrollment.enrollment_id,
        )
    )
    result = await db.execute(stmt)
    return [
        {
            "course_id": enrollment.course_id,
            "course_title": title,
            "progress": enrollment.progress,
            "is_completed": enrollment.is_completed,
            "total_contents": total,
            "completed_contents": completed,
            "last_accessed_at": enrollment.last_accessed_at,
        }
        for enrollment, title, total, completed in result.all()
    ]


async def get_recent_activity(
    db: AsyncSession, user_id: UUID, limit: int = RECENT_ACTIVITY_LIMIT
) -> list[dict]:
    """Most recently updated progress rows across all of the user's enrollments."""
    stmt = (
        select(ContentProgress, ContentItem, Course)
        .join(Enrollment, Enrollment.enrollment_id == ContentProgress.enrollment_id)
        .join(ContentItem, ContentItem.content_id == ContentProgress.content_id)
        .join(Course, Course.course_id == Enrollment.course_id)
        .where(Enrollment.user_id == user_id)
        .order_by(ContentProgress.updated_at.desc(), ContentProgress.progress_id.desc())
        .limit(limit)
    )
    result = await db.execute(stmt)
    return [
        {
            "course_id": course.course_id,
            "course_title": course.title,
            "content_id": item.content_id,
            "content_title": item.title,
            "content_type": item.content_type,
            "is_completed": progress.is_completed,
            "time_spent": progress.time_spent,
            "updated_at": progress.updated_at,
        }
        for progress, item, course in result.all()
    ]


async def get_achievements(db: AsyncSession, user_id: UUID) -> dict:
    enrolled = await db.scalar(
        select(func.count()).select_from(Enrollment).where(Enrollment.user_id == user_id)
    )
    completed = await db.scalar(
        select(func.count())
        .select_from(Enrollment)
        .where(Enrollment.user_id == user_id, Enrollment.completed_at.is_not(None))
    )
    time_spent = await db.scalar(
        select(func.coalesce(func.sum(ContentProgress.time_spent), 0))
        .select_from(ContentProgress)
        .join(Enrollment, Enrollment.enrollment_id == ContentProgress.enrollment_id)
        .where(Enrollment.user_id == user_id)
    )
    certificates = await db.scalar(
        select(func.count()).select_from(Certificate).where(Certificate.user_id == user_id)
    )
    totals = {
        "total_courses_enrolled": enrolled or 0,
        "total_courses_completed": completed or 0,
        "total_time_spent": int(time_spent or 0),
        "total_certificates": certificates or 0,
    }
    totals["badges"] = [
        {"name": name, "description": description}
        for name, description, earned in _BADGES
        if earned(totals)
    ]
    return totals
