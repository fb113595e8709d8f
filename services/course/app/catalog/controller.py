"""Catalog controller: maps service results to HTTP responses, catches domain exceptions."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog import cache, service
from app.catalog.schemas import (
    ContentItemResponse,
    ContentOutlineItem,
    CourseDetailResponse,
    CourseListFilters,
    CourseListResponse,
    CourseResponse,
    CreateContentRequest,
    CreateCourseRequest,
    ResumeResponse,
    UpdateContentRequest,
    UpdateCourseRequest,
)
from app.exceptions import (
    ContentNotFoundError,
    CourseNotFoundError,
    InvalidContentPayloadError,
    NoMoreContentError,
    NoProgressFoundError,
    NotCourseAuthorError,
)
from app.models.enrollment import Enrollment
from shared.models import ApiResponse, PageMeta, PaginationParams, ok

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> Exception:
    if isinstance(exc, CourseNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    if isinstance(exc, ContentNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    if isinstance(exc, NoMoreContentError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No more content to complete")
    if isinstance(exc, NoProgressFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No progress found")
    if isinstance(exc, NotCourseAuthorError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to modify this course",
        )
    if isinstance(exc, InvalidContentPayloadError):
        return RequestValidationError(exc.errors)
    logger.exception("Unexpected catalog error")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


async def _commit_and_invalidate(db: AsyncSession, course_id: UUID, redis: Redis | None) -> None:
    # Invalidate only after the write is committed
    await db.commit()
    await cache.invalidate_outline(course_id, redis)


# ---------------------------------------------------------------------------
# Course
# ---------------------------------------------------------------------------


async def create_course(
    db: AsyncSession, author_id: UUID, body: CreateCourseRequest
) -> ApiResponse[CourseResponse]:
    try:
        course = await service.create_course(db, author_id, **body.model_dump())
        return ok(CourseResponse.model_validate(course), "Course created successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def list_courses(
    db: AsyncSession, filters: CourseListFilters, params: PaginationParams
) -> ApiResponse[CourseListResponse]:
    try:
        courses, total = await service.list_courses(
            db,
            **filters.model_dump(),
            offset=params.offset(),
            limit=params.limit,
        )
        return ok(
            CourseListResponse(
                items=[CourseResponse.model_validate(c) for c in courses],
                pagination=PageMeta.build(params, total),
            ),
            "Courses retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_course_detail(
    db: AsyncSession,
    course_id: UUID,
    viewer_id: UUID | None,
    redis: Redis | None,
    cache_ttl_secs: int,
) -> ApiResponse[CourseDetailResponse]:
    """Anonymous callers are served from the outline cache when possible."""
    try:
        if viewer_id is None:
            cached = await cache.get_outline(course_id, redis)
            if cached:
                return ok(CourseDetailResponse.model_validate_json(cached), "Course retrieved successfully")

        detail = await service.get_course_detail(db, course_id, viewer_id)
        response = CourseDetailResponse(
            course=CourseResponse.model_validate(detail["course"]),
            contents=[ContentOutlineItem.model_validate(c) for c in detail["contents"]],
            total_contents=detail["total_contents"],
            is_enrolled=detail["is_enrolled"],
            is_author=detail["is_author"],
        )
        if viewer_id is None:
            await cache.set_outline(course_id, response.model_dump_json(), cache_ttl_secs, redis)
        return ok(response, "Course retrieved successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def update_course(
    db: AsyncSession,
    author_id: UUID,
    course_id: UUID,
    body: UpdateCourseRequest,
    redis: Redis | None,
) -> ApiResponse[CourseResponse]:
    try:
        course = await service.update_course(
            db, author_id, course_id, body.to_updates()
        )
        await _commit_and_invalidate(db, course_id, redis)
        return ok(CourseResponse.model_validate(course), "Course updated successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def publish_course(
    db: AsyncSession, author_id: UUID, course_id: UUID, redis: Redis | None
) -> ApiResponse[CourseResponse]:
    try:
        course = await service.publish_course(db, author_id, course_id)
        await _commit_and_invalidate(db, course_id, redis)
        return ok(CourseResponse.model_validate(course), "Course published successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def delete_course(
    db: AsyncSession, author_id: UUID, course_id: UUID, redis: Redis | None
) -> ApiResponse[None]:
    try:
        await service.delete_course(db, author_id, course_id)
        await _commit_and_invalidate(db, course_id, redis)
        return ok(None, "Course deleted successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


async def list_contents(
    db: AsyncSession, author_id: UUID, course_id: UUID
) -> ApiResponse[list[ContentItemResponse]]:
    try:
        items = await service.list_contents_for_author(db, author_id, course_id)
        return ok(
            [ContentItemResponse.model_validate(i) for i in items],
            "Contents retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def add_content(
    db: AsyncSession,
    author_id: UUID,
    course_id: UUID,
    body: CreateContentRequest,
    redis: Redis | None,
) -> ApiResponse[ContentItemResponse]:
    try:
        item = await service.add_content(db, author_id, course_id, **body.model_dump())
        await _commit_and_invalidate(db, course_id, redis)
        return ok(ContentItemResponse.model_validate(item), "Content added successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def update_content(
    db: AsyncSession,
    author_id: UUID,
    course_id: UUID,
    content_id: UUID,
    body: UpdateContentRequest,
    redis: Redis | None,
) -> ApiResponse[ContentItemResponse]:
    try:
        item = await service.update_content(
            db,
            author_id,
            course_id,
            content_id,
            body.model_dump(exclude_unset=True, exclude_none=True),
        )
        await _commit_and_invalidate(db, course_id, redis)
        return ok(ContentItemResponse.model_validate(item), "Content updated successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def delete_content(
    db: AsyncSession,
    author_id: UUID,
    course_id: UUID,
    content_id: UUID,
    redis: Redis | None,
) -> ApiResponse[None]:
    try:
        await service.delete_content(db, author_id, course_id, content_id)
        await _commit_and_invalidate(db, course_id, redis)
        return ok(None, "Content deleted successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


async def next_content(
    db: AsyncSession, enrollment: Enrollment
) -> ApiResponse[ContentItemResponse]:
    try:
        item = await service.next_content(db, enrollment)
        return ok(ContentItemResponse.model_validate(item), "Next content retrieved successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def resume(db: AsyncSession, enrollment: Enrollment) -> ApiResponse[ResumeResponse]:
    try:
        item, progress = await service.resume_position(db, enrollment)
        return ok(
            ResumeResponse(
                content=ContentItemResponse.model_validate(item),
                last_position=progress.last_position,
                is_completed=progress.is_completed,
                updated_at=progress.updated_at,
            ),
            "Resume point retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
