"""Catalog router: HTTP layer only.

Course and content authoring, the public catalog, and the two navigation
endpoints (next content, resume) of an enrolled course.
Delegates to controller for business logic orchestration.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog import controller
from app.catalog.schemas import (
    ContentItemResponse,
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
from app.config import Settings
from app.database import get_db
from app.dependencies import (
    get_current_user,
    get_optional_user,
    get_redis,
    get_settings,
    require_enrollment,
)
from app.models.enrollment import Enrollment
from app.models.enums import CourseLevel, CourseSortField, SortOrder
from shared.models import ApiResponse, PaginationParams

router = APIRouter(tags=["Catalog"])


# ======================================================================
# Course endpoints
# ======================================================================


@router.get(
    "/courses",
    response_model=ApiResponse[CourseListResponse],
    summary="List / search published courses",
    description="Public course catalog with optional filters, newest first by default.",
)
async def list_courses(
    category: str | None = Query(None, description="Filter by category."),
    level: CourseLevel | None = Query(None, description="Filter by level."),
    search: str | None = Query(None, description="Search in title and description."),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    sort: CourseSortField = Query(CourseSortField.CREATED_AT, description="Sort field."),
    order: SortOrder = Query(SortOrder.DESC, description="Sort direction."),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[CourseListResponse]:
    filters = CourseListFilters(
        category=category,
        level=level,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        order=order,
    )
    return await controller.list_courses(db, filters, PaginationParams(page=page, limit=limit))


@router.post(
    "/courses",
    response_model=ApiResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new course",
    description="The caller becomes the author. Courses start unpublished.",
)
async def create_course(
    body: CreateCourseRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[CourseResponse]:
    return await controller.create_course(db, user_id, body)


@router.get(
    "/courses/{course_id}",
    response_model=ApiResponse[CourseDetailResponse],
    summary="Get course detail with its content outline",
    description="Enrolled learners and the author see every item; "
    "everyone else only sees preview items.",
)
async def get_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    viewer_id: UUID | None = Depends(get_optional_user),
    redis: Redis | None = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> ApiResponse[CourseDetailResponse]:
    return await controller.get_course_detail(
        db, course_id, viewer_id, redis, settings.catalog_cache_ttl_secs
    )


@router.put(
    "/courses/{course_id}",
    response_model=ApiResponse[CourseResponse],
    summary="Update a course (author only)",
)
async def update_course(
    course_id: UUID,
    body: UpdateCourseRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
    redis: Redis | None = Depends(get_redis),
) -> ApiResponse[CourseResponse]:
    return await controller.update_course(db, user_id, course_id, body, redis)


@router.delete(
    "/courses/{course_id}",
    response_model=ApiResponse[None],
    summary="Delete a course (author only)",
)
async def delete_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
    redis: Redis | None = Depends(get_redis),
) -> ApiResponse[None]:
    return await controller.delete_course(db, user_id, course_id, redis)


@router.put(
    "/courses/{course_id}/publish",
    response_model=ApiResponse[CourseResponse],
    summary="Publish a course (author only)",
)
async def publish_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
    redis: Redis | None = Depends(get_redis),
) -> ApiResponse[CourseResponse]:
    return await controller.publish_course(db, user_id, course_id, redis)


# ======================================================================
# Content endpoints
# ======================================================================


@router.get(
    "/courses/{course_id}/contents",
    response_model=ApiResponse[list[ContentItemResponse]],
    summary="List every content item of a course (author only)",
)
async def list_contents(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[list[ContentItemResponse]]:
    return await controller.list_contents(db, user_id, course_id)


@router.post(
    "/courses/{course_id}/contents",
    response_model=ApiResponse[ContentItemResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add a content item (author only)",
    description="``data`` is validated against the payload of ``content_type``. "
    "Omitting ``order`` appends the item.",
)
async def add_content(
    course_id: UUID,
    body: CreateContentRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
    redis: Redis | None = Depends(get_redis),
) -> ApiResponse[ContentItemResponse]:
    return await controller.add_content(db, user_id, course_id, body, redis)


@router.put(
    "/courses/{course_id}/contents/{content_id}",
    response_model=ApiResponse[ContentItemResponse],
    summary="Update a content item (author only)",
)
async def update_content(
    course_id: UUID,
    content_id: UUID,
    body: UpdateContentRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
    redis: Redis | None = Depends(get_redis),
) -> ApiResponse[ContentItemResponse]:
    return await controller.update_content(db, user_id, course_id, content_id, body, redis)


@router.delete(
    "/courses/{course_id}/contents/{content_id}",
    response_model=ApiResponse[None],
    summary="Delete a content item (author only)",
)
async def delete_content(
    course_id: UUID,
    content_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
    redis: Redis | None = Depends(get_redis),
) -> ApiResponse[None]:
    return await controller.delete_content(db, user_id, course_id, content_id, redis)


# ======================================================================
# Navigation (enrolled learners)
# ======================================================================


@router.get(
    "/enrolled-courses/{course_id}/next-content",
    response_model=ApiResponse[ContentItemResponse],
    summary="First item not yet completed",
    description="404 once every item is completed.",
)
async def next_content(
    db: AsyncSession = Depends(get_db),
    enrollment: Enrollment = Depends(require_enrollment),
) -> ApiResponse[ContentItemResponse]:
    return await controller.next_content(db, enrollment)


@router.get(
    "/enrolled-courses/{course_id}/resume",
    response_model=ApiResponse[ResumeResponse],
    summary="Item and position the learner touched last",
    description="404 until some progress has been recorded.",
)
async def resume(
    db: AsyncSession = Depends(get_db),
    enrollment: Enrollment = Depends(require_enrollment),
) -> ApiResponse[ResumeResponse]:
    return await controller.resume(db, enrollment)
