"""Review router: HTTP layer only."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies import get_current_user
from app.reviews import controller
from app.reviews.schemas import (
    CreateReviewRequest,
    ReviewListResponse,
    ReviewResponse,
    UpdateReviewRequest,
)
from shared.models import ApiResponse

router = APIRouter(tags=["Reviews"])


@router.get(
    "/courses/{course_id}/reviews",
    response_model=ApiResponse[ReviewListResponse],
    summary="List reviews of a course",
    description="Newest first, with the total count and average rating.",
)
async def list_reviews(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[ReviewListResponse]:
    return await controller.list_reviews(db, course_id)


@router.post(
    "/courses/{course_id}/reviews",
    response_model=ApiResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Review a completed course",
    description="Requires a completed enrollment. One review per user and course.",
)
async def add_review(
    course_id: UUID,
    body: CreateReviewRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[ReviewResponse]:
    return await controller.add_review(db, user_id, course_id, body)


@router.put(
    "/reviews/{review_id}",
    response_model=ApiResponse[ReviewResponse],
    summary="Update my review",
)
async def update_review(
    review_id: UUID,
    body: UpdateReviewRequest,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[ReviewResponse]:
    return await controller.update_review(db, user_id, review_id, body)


@router.delete(
    "/reviews/{review_id}",
    response_model=ApiResponse[None],
    summary="Delete my review",
)
async def delete_review(
    review_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[None]:
    return await controller.delete_review(db, user_id, review_id)
