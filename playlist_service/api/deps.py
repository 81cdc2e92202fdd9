"""
FastAPI dependencies for database access and caller identification.

Provides:
- get_db: database session dependency
- get_current_user_id: requires a valid Bearer token and returns its user id
- get_optional_user_id: same, but anonymous callers resolve to None

Tokens are issued by the user service; this service only verifies the
signature and reads the `sub` claim.
"""

from __future__ import annotations

from typing import Generator, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from playlist_service.core.security import user_id_from_token
from playlist_service.db.session import get_db as _get_db

security_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# PUBLIC_INTERFACE
def get_db() -> Generator[Session, None, None]:
    """Yield a database session for the request lifecycle."""
    yield from _get_db()


# PUBLIC_INTERFACE
def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> Optional[int]:
    """
    Resolve the caller's user id from the Authorization: Bearer token, if any.

    Raises:
    - 401 if a token is present but invalid or expired
    """
    if credentials is None or not credentials.credentials:
        return None
    if credentials.scheme.lower() != "bearer":
        raise _unauthorized("Not authenticated")
    try:
        return user_id_from_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid or expired token")


# PUBLIC_INTERFACE
def get_current_user_id(user_id: Optional[int] = Depends(get_optional_user_id)) -> int:
    """
    Require an authenticated caller.

    Raises:
    - 401 if the token is missing or invalid
    """
    if user_id is None:
        raise _unauthorized("Not authenticated")
    return user_id
