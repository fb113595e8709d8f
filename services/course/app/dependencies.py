from datetime import datetime, timezone
from uuid import UUID

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.enrollment import service as enrollment_service
from app.exceptions import NotEnrolledError
from app.models.enrollment import Enrollment
from shared.auth.dependencies import credentials_to_user_id, http_bearer


def get_settings() -> Settings:
    return Settings()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(http_bearer),
    settings: Settings = Depends(get_settings),
) -> UUID:
    return credentials_to_user_id(
        credentials,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
    )


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Security(http_bearer),
    settings: Settings = Depends(get_settings),
) -> UUID | None:
    """Returns user_id if a valid JWT is present, None for anonymous requests."""
    if credentials is None:
        return None
    try:
        return credentials_to_user_id(
            credentials,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )
    except HTTPException:
        return None


def get_redis(request: Request) -> Redis | None:
    """Redis client from app state, or None when caching is disabled."""
    return getattr(request.app.state, "redis", None)


async def require_enrollment(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    user_id: UUID = Depends(get_current_user),
) -> Enrollment:
    """Resolve (user, course) to the caller's enrollment or fail with 403.

    Every enrolled route goes through here, so it also records the access time.
    """
    try:
        enrollment = await enrollment_service.get_enrollment(db, user_id, course_id)
    except NotEnrolledError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not enrolled in this course",
        )
    enrollment.last_accessed_at = datetime.now(timezone.utc)
    await db.flush()
    return enrollment
