"""Progress controller: maps service results to HTTP responses, catches domain exceptions."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.schemas import ContentItemResponse
from app.exceptions import ContentNotFoundError, NotEnrollmentOwnerError
from app.models.content_item import ContentItem
from app.models.content_progress import ContentProgress
from app.models.enrollment import Enrollment
from app.progress import service
from app.progress.schemas import (
    AchievementsResponse,
    ActivityItem,
    ContentCompletionItem,
    ContentProgressResponse,
    ContentWithProgressResponse,
    CourseProgressResponse,
    CourseProgressSummary,
    RecordProgressResponse,
    UpdateProgressRequest,
)
from shared.models import ApiResponse, ok

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ContentNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    if isinstance(exc, NotEnrollmentOwnerError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to update this enrollment",
        )
    logger.exception("Unexpected progress error")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


def _completion_item(item: ContentItem, progress: ContentProgress | None) -> ContentCompletionItem:
    return ContentCompletionItem(
        content_id=item.content_id,
        title=item.title,
        content_type=item.content_type,
        order=item.order,
        duration_mins=item.duration_mins,
        is_preview=item.is_preview,
        is_completed=progress is not None and progress.is_completed,
        time_spent=progress.time_spent if progress else 0,
        last_position=progress.last_position if progress else 0,
        completed_at=progress.completed_at if progress else None,
    )


async def record_progress(
    db: AsyncSession,
    enrollment: Enrollment,
    user_id: UUID,
    content_id: UUID,
    body: UpdateProgressRequest,
) -> ApiResponse[RecordProgressResponse]:
    try:
        progress = await service.record_progress(
            db, enrollment, user_id, content_id, **body.model_dump()
        )
        return ok(
            RecordProgressResponse(
                progress=ContentProgressResponse.model_validate(progress),
                course_progress=enrollment.progress,
            ),
            "Progress updated successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_course_progress(
    db: AsyncSession, enrollment: Enrollment
) -> ApiResponse[CourseProgressResponse]:
    try:
        summary = await service.get_course_progress(db, enrollment)
        contents = [_completion_item(item, p) for item, p in summary.pop("contents")]
        return ok(
            CourseProgressResponse(**summary, contents=contents),
            "Course progress retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def list_contents(
    db: AsyncSession, enrollment: Enrollment
) -> ApiResponse[list[ContentCompletionItem]]:
    try:
        pairs = await service.list_contents_with_progress(db, enrollment)
        return ok(
            [_completion_item(item, p) for item, p in pairs],
            "Course contents retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_content(
    db: AsyncSession, enrollment: Enrollment, content_id: UUID
) -> ApiResponse[ContentWithProgressResponse]:
    try:
        item, progress = await service.get_content_with_progress(db, enrollment, content_id)
        return ok(
            ContentWithProgressResponse(
                content=ContentItemResponse.model_validate(item),
                progress=ContentProgressResponse.model_validate(progress) if progress else None,
            ),
            "Content retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_all_courses_progress(
    db: AsyncSession, user_id: UUID
) -> ApiResponse[list[CourseProgressSummary]]:
    try:
        rows = await service.get_all_courses_progress(db, user_id)
        return ok(
            [CourseProgressSummary(**row) for row in rows],
            "Progress retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_recent_activity(
    db: AsyncSession, user_id: UUID
) -> ApiResponse[list[ActivityItem]]:
    try:
        rows = await service.get_recent_activity(db, user_id)
        return ok([ActivityItem(**row) for row in rows], "Recent activity retrieved successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_achievements(db: AsyncSession, user_id: UUID) -> ApiResponse[AchievementsResponse]:
    try:
        achievements = await service.get_achievements(db, user_id)
        return ok(AchievementsResponse(**achievements), "Achievements retrieved successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
