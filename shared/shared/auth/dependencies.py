from uuid import UUID

import jwt
from fastapi import HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

http_bearer = HTTPBearer(auto_error=False)


def decode_user_id(
    token: str,
    *,
    secret: str,
    algorithm: str = "HS256",
    issuer: str | None = None,
    audience: str | None = None,
) -> UUID:
    """Verify a bearer token issued by the identity service and return its subject.

    Raises ``jwt.PyJWTError``, ``KeyError`` or ``ValueError`` on any defect;
    callers translate those into 401s.
    """
    options = {"verify_aud": audience is not None}
    payload = jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        issuer=issuer,
        audience=audience,
        options=options,
    )
    return UUID(payload["sub"])


def credentials_to_user_id(
    credentials: HTTPAuthorizationCredentials | None,
    *,
    secret: str,
    algorithm: str = "HS256",
    issuer: str | None = None,
    audience: str | None = None,
) -> UUID:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_user_id(
            credentials.credentials,
            secret=secret,
            algorithm=algorithm,
            issuer=issuer,
            audience=audience,
        )
    except (jwt.PyJWTError, KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
