"""
Token utilities for the playlist service.

Access tokens are issued by the user service and signed with the shared
JWT_SECRET. This module verifies them and extracts the caller's user id.
`create_access_token` mirrors the issuer so local tools and tests can mint
tokens with the same claims.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt  # PyJWT

from playlist_service.core.config import get_settings


class InvalidSubjectError(jwt.InvalidTokenError):
    """Raised when a token's subject is not a user id."""


# PUBLIC_INTERFACE
def create_access_token(subject: str, expires_delta: Optional[timedelta] = None, extra_claims: Optional[Dict[str, Any]] = None) -> str:
    """Create a signed JWT access token.

    Parameters:
    - subject: The token subject (the user id).
    - expires_delta: Optional timedelta for expiration; falls back to configured minutes.
    - extra_claims: Optional additional JWT claims to include.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload: Dict[str, Any] = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    if extra_claims:
        payload.update(extra_claims)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token, returning the payload claims.

    Raises:
    - jwt.ExpiredSignatureError if the token is expired
    - jwt.InvalidTokenError for any other token issues
    """
    settings = get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


# PUBLIC_INTERFACE
def user_id_from_token(token: str) -> int:
    """Return the integer user id carried in the token's `sub` claim."""
    payload = decode_token(token)
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        raise InvalidSubjectError("Token subject is not a user id")
