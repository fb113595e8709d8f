"""Progress router: HTTP layer only.

Learner-facing progress endpoints under ``/enrolled-courses``. The
collection-level routes are declared before the ``{course_id}`` ones.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, require_enrollment
from app.models.enrollment import Enrollment
from app.progress import controller
from app.progress.schemas import (
    AchievementsResponse,
    ActivityItem,
    ContentCompletionItem,
    ContentWithProgressResponse,
    CourseProgressResponse,
    CourseProgressSummary,
    RecordProgressResponse,
    UpdateProgressRequest,
)
from shared.models import ApiResponse

router = APIRouter(prefix="/enrolled-courses", tags=["Progress"])


# ======================================================================
# Across all enrollments
# ======================================================================


@router.get(
    "/progress",
    response_model=ApiResponse[list[CourseProgressSummary]],
    summary="Progress summary of every enrolled course",
)
async def get_all_courses_progress(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[list[CourseProgressSummary]]:
    return await controller.get_all_courses_progress(db, user_id)


@router.get(
    "/activity",
    response_model=ApiResponse[list[ActivityItem]],
    summary="Most recently touched content across enrolled courses",
)
async def get_recent_activity(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[list[ActivityItem]]:
    return await controller.get_recent_activity(db, user_id)


@router.get(
    "/achievements",
    response_model=ApiResponse[AchievementsResponse],
    summary="Learning totals and earned badges",
)
async def get_achievements(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[AchievementsResponse]:
    return await controller.get_achievements(db, user_id)


# ======================================================================
# One enrolled course
# ======================================================================


@router.get(
    "/{course_id}/progress",
    response_model=ApiResponse[CourseProgressResponse],
    summary="Progress of one enrolled course with per-content details",
)
async def get_course_progress(
    db: AsyncSession = Depends(get_db),
    enrollment: Enrollment = Depends(require_enrollment),
) -> ApiResponse[CourseProgressResponse]:
    return await controller.get_course_progress(db, enrollment)


@router.get(
    "/{course_id}/contents",
    response_model=ApiResponse[list[ContentCompletionItem]],
    summary="Course contents with the learner's completion state",
)
async def list_contents(
    db: AsyncSession = Depends(get_db),
    enrollment: Enrollment = Depends(require_enrollment),
) -> ApiResponse[list[ContentCompletionItem]]:
    return await controller.list_contents(db, enrollment)


@router.get(
    "/{course_id}/contents/{content_id}",
    response_model=ApiResponse[ContentWithProgressResponse],
    summary="One content item with its progress row",
)
async def get_content(
    content_id: UUID,
    db: AsyncSession = Depends(get_db),
    enrollment: Enrollment = Depends(require_enrollment),
) -> ApiResponse[ContentWithProgressResponse]:
    return await controller.get_content(db, enrollment, content_id)


@router.put(
    "/{course_id}/contents/{content_id}/progress",
    response_model=ApiResponse[RecordProgressResponse],
    summary="Record progress on a content item",
    description="Adds ``time_spent`` to the running total, overwrites "
    "``last_position`` and ``is_completed``, then recomputes the course percentage.",
)
async def record_progress(
    content_id: UUID,
    body: UpdateProgressRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
    enrollment: Enrollment = Depends(require_enrollment),
) -> ApiResponse[RecordProgressResponse]:
    return await controller.record_progress(db, enrollment, user_id, content_id, body)
