"""Enrollment router: HTTP layer only.

Enroll / unenroll on a course, and the learner's view of their enrollments.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user, require_enrollment
from app.enrollment import controller
from app.enrollment.schemas import EnrollmentDetailResponse, EnrollmentResponse
from app.models.enrollment import Enrollment
from shared.models import ApiResponse

router = APIRouter(tags=["Enrollment"])


@router.post(
    "/courses/{course_id}/enroll",
    response_model=ApiResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in a published course",
    description="Free courses are marked paid immediately; priced courses "
    "start with a pending payment. One enrollment per user and course.",
)
async def enroll(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[EnrollmentResponse]:
    return await controller.enroll(db, user_id, course_id)


@router.delete(
    "/courses/{course_id}/enroll",
    response_model=ApiResponse[None],
    summary="Unenroll from a course",
    description="Deletes the enrollment and all of its progress. Certificates are kept.",
)
async def unenroll(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[None]:
    return await controller.unenroll(db, user_id, course_id)


@router.get(
    "/enrolled-courses",
    response_model=ApiResponse[list[EnrollmentDetailResponse]],
    summary="List my enrolled courses",
)
async def list_enrolled_courses(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[list[EnrollmentDetailResponse]]:
    return await controller.list_my_enrollments(db, user_id)


@router.get(
    "/enrolled-courses/{course_id}",
    response_model=ApiResponse[EnrollmentDetailResponse],
    summary="Get one enrolled course",
)
async def get_enrolled_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    enrollment: Enrollment = Depends(require_enrollment),
) -> ApiResponse[EnrollmentDetailResponse]:
    return await controller.get_enrollment_detail(db, enrollment.user_id, course_id)
