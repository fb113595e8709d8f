"""Enrollment controller: maps service results to HTTP responses, catches domain exceptions."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.enrollment import service
from app.enrollment.schemas import EnrollmentDetailResponse, EnrollmentResponse
from app.exceptions import AlreadyEnrolledError, CourseNotFoundError, NotEnrolledError
from shared.models import ApiResponse, ok

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, CourseNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    if isinstance(exc, AlreadyEnrolledError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Already enrolled in this course"
        )
    if isinstance(exc, NotEnrolledError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="You are not enrolled in this course"
        )
    logger.exception("Unexpected enrollment error")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


async def enroll(
    db: AsyncSession, user_id: UUID, course_id: UUID
) -> ApiResponse[EnrollmentResponse]:
    try:
        enrollment = await service.enroll(db, user_id, course_id)
        return ok(EnrollmentResponse.model_validate(enrollment), "Successfully enrolled in course")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def unenroll(db: AsyncSession, user_id: UUID, course_id: UUID) -> ApiResponse[None]:
    try:
        await service.unenroll(db, user_id, course_id)
        return ok(None, "Successfully unenrolled from course")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def list_my_enrollments(
    db: AsyncSession, user_id: UUID
) -> ApiResponse[list[EnrollmentDetailResponse]]:
    try:
        enrollments = await service.list_my_enrollments(db, user_id)
        return ok(
            [EnrollmentDetailResponse.model_validate(e) for e in enrollments],
            "Enrolled courses retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_enrollment_detail(
    db: AsyncSession, user_id: UUID, course_id: UUID
) -> ApiResponse[EnrollmentDetailResponse]:
    try:
        enrollment = await service.get_enrollment_detail(db, user_id, course_id)
        return ok(
            EnrollmentDetailResponse.model_validate(enrollment),
            "Enrolled course retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
