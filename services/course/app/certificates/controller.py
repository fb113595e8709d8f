"""Certificate controller: maps service results to HTTP responses, catches domain exceptions."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.certificates import service
from app.certificates.schemas import CertificateResponse
from app.exceptions import (
    AlreadyCompletedError,
    CertificateNotFoundError,
    CourseNotFoundError,
    NotEnrollmentOwnerError,
)
from app.models.enrollment import Enrollment
from shared.models import ApiResponse, ok

logger = logging.getLogger(__name__)


def _handle_domain_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (CertificateNotFoundError, CourseNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, AlreadyCompletedError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Course already completed")
    if isinstance(exc, NotEnrollmentOwnerError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to complete this enrollment",
        )
    logger.exception("Unexpected certificate error")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error.")


async def complete_course(
    db: AsyncSession, enrollment: Enrollment, user_id: UUID
) -> ApiResponse[CertificateResponse]:
    try:
        certificate = await service.complete_course(db, enrollment, user_id)
        return ok(
            CertificateResponse.model_validate(certificate),
            "Course completed successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_my_certificates(
    db: AsyncSession, user_id: UUID
) -> ApiResponse[list[CertificateResponse]]:
    try:
        certificates = await service.list_my_certificates(db, user_id)
        return ok(
            [CertificateResponse.model_validate(c) for c in certificates],
            "Certificates retrieved successfully",
        )
    except Exception as exc:
        raise _handle_domain_error(exc) from exc


async def get_certificate(db: AsyncSession, code: str) -> ApiResponse[CertificateResponse]:
    try:
        certificate = await service.get_certificate_by_code(db, code)
        return ok(CertificateResponse.model_validate(certificate), "Certificate retrieved successfully")
    except Exception as exc:
        raise _handle_domain_error(exc) from exc
