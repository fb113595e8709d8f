"""Certificate service: course completion, certificate issuance and lookup.

Pure business logic, no FastAPI imports.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AlreadyCompletedError,
    CertificateNotFoundError,
    CourseNotFoundError,
    NotEnrollmentOwnerError,
)
from app.models.certificate import Certificate
from app.models.course import Course
from app.models.enrollment import Enrollment

logger = logging.getLogger(__name__)

CERTIFICATE_CODE_PREFIX = "CERT-"


# ---------------------------------------------------------------------------
# Certificate code
# ---------------------------------------------------------------------------


def generate_certificate_code() -> str:
    """``CERT-`` followed by 16 random uppercase hex characters."""
    return f"{CERTIFICATE_CODE_PREFIX}{secrets.token_hex(8).upper()}"


async def _unique_certificate_code(db: AsyncSession) -> str:
    while True:
        code = generate_certificate_code()
        exists = await db.scalar(
            select(Certificate.certificate_id).where(Certificate.certificate_code == code)
        )
        if exists is None:
            return code


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


async def complete_course(db: AsyncSession, enrollment: Enrollment, user_id: UUID) -> Certificate:
    """Mark the enrollment completed and issue its certificate.

    Completion is explicit and independent of the content percentage, which
    is forced to 100. A learner who completed, unenrolled and re-enrolled
    gets their original certificate back rather than a second one.
    """
    if enrollment.user_id != user_id:
        raise NotEnrollmentOwnerError()
    if enrollment.completed_at is not None:
        raise AlreadyCompletedError()

    course = await db.get(Course, enrollment.course_id)
    if course is None:
        raise CourseNotFoundError(str(enrollment.course_id))

    enrollment.completed_at = datetime.now(timezone.utc)
    enrollment.progress = 100
    await db.flush()

    existing = await db.scalar(
        select(Certificate).where(
            Certificate.user_id == user_id,
            Certificate.course_id == enrollment.course_id,
        )
    )
    if existing is not None:
        logger.info(
            "Course %s re-completed by %s, reusing certificate %s",
            enrollment.course_id, user_id, existing.certificate_code,
        )
        return existing

    certificate = Certificate(
        certificate_code=await _unique_certificate_code(db),
        user_id=user_id,
        course_id=enrollment.course_id,
        course_title=course.title,
    )
    db.add(certificate)
    await db.flush()
    await db.refresh(certificate)
    logger.info(
        "Certificate %s issued to %s for course %s",
        certificate.certificate_code, user_id, enrollment.course_id,
    )
    return certificate


# ---------------------------------------------------------------------------
# Retrieval
# ---------------------------------------------------------------------------


async def list_my_certificates(db: AsyncSession, user_id: UUID) -> list[Certificate]:
    """Certificates earned by the user, newest first."""
    stmt = (
        select(Certificate)
        .where(Certificate.user_id == user_id)
        .order_by(Certificate.issued_at.desc(), Certificate.certificate_id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_certificate_by_code(db: AsyncSession, code: str) -> Certificate:
    certificate = await db.scalar(
        select(Certificate).where(Certificate.certificate_code == code.strip().upper())
    )
    if certificate is None:
        raise CertificateNotFoundError(code)
    return certificate
