"""Certificate router: course completion, my certificates, and lookup by code."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.certificates import controller
from app.certificates.schemas import CertificateResponse
from app.database import get_db
from app.dependencies import get_current_user, require_enrollment
from app.models.enrollment import Enrollment
from shared.models import ApiResponse

router = APIRouter(tags=["Certificates"])


@router.post(
    "/enrolled-courses/{course_id}/complete",
    response_model=ApiResponse[CertificateResponse],
    summary="Complete an enrolled course",
    description="Marks the enrollment completed, sets progress to 100 and "
    "issues the certificate. Returns 400 if the course was already completed.",
)
async def complete_course(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
    enrollment: Enrollment = Depends(require_enrollment),
) -> ApiResponse[CertificateResponse]:
    return await controller.complete_course(db, enrollment, user_id)


@router.get(
    "/certificates",
    response_model=ApiResponse[list[CertificateResponse]],
    summary="List my certificates",
    description="Returns all certificates earned by the authenticated user, "
    "ordered by issue date (newest first).",
)
async def get_my_certificates(
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> ApiResponse[list[CertificateResponse]]:
    return await controller.get_my_certificates(db, user_id)


@router.get(
    "/certificates/{certificate_code}",
    response_model=ApiResponse[CertificateResponse],
    summary="Get certificate by code",
    description="Public lookup, no authentication required.",
)
async def get_certificate(
    certificate_code: str,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[CertificateResponse]:
    return await controller.get_certificate(db, certificate_code)
