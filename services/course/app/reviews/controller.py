"""Review controller: maps service results to HTTP responses, catches domain exceptions."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    CourseNotCompletedError,
    CourseNotFoundError,
    NotReviewOwnerError,
    ReviewAlreadyExistsError,
    ReviewNotFoundError,
)
from app.reviews import service
from app.reviews.schemas import (
    CreateReviewRequest,
    ReviewListResponse,
    ReviewResponse,
    UpdateReviewRequest,
)
from shared.models import ApiResponse, ok

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, CourseNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    if isinstance(exc, ReviewNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    if isinstance(exc, CourseNotCompletedError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must complete the course before reviewing it",
        )
    if isinstance(exc, ReviewAlreadyExistsError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="You have already reviewed this course"
        )
    if isinstance(exc, NotReviewOwnerError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to modify this review",
        )
    logger.exception("Unexpected review error")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


async def add_review(
    db: AsyncSession, user_id: UUID, course_id: UUID, body: CreateReviewRequest
) -> ApiResponse[ReviewResponse]:
    try:
        review = await service.add_review(db, user_id, course_id, **body.model_dump())
        return ok(ReviewResponse.model_validate(review), "Review added successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def list_reviews(db: AsyncSession, course_id: UUID) -> ApiResponse[ReviewListResponse]:
    try:
        reviews, total, average = await service.list_reviews(db, course_id)
        return ok(
            ReviewListResponse(
                items=[ReviewResponse.model_validate(r) for r in reviews],
                total=total,
                average_rating=average,
            ),
            "Reviews retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def update_review(
    db: AsyncSession, user_id: UUID, review_id: UUID, body: UpdateReviewRequest
) -> ApiResponse[ReviewResponse]:
    try:
        review = await service.update_review(
            db, user_id, review_id, body.model_dump(exclude_unset=True, exclude_none=True)
        )
        return ok(ReviewResponse.model_validate(review), "Review updated successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def delete_review(db: AsyncSession, user_id: UUID, review_id: UUID) -> ApiResponse[None]:
    try:
        await service.delete_review(db, user_id, review_id)
        return ok(None, "Review deleted successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
