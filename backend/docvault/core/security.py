"""
Security utilities for identity provider session tokens.

Sign-in happens at the external identity provider; this module only
verifies the bearer tokens it issues and extracts their claims.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from docvault.config import settings


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Create a signed session token.

    Used by local tooling and tests to mint tokens shaped like the ones the
    identity provider issues.

    Args:
        subject: The external user ID.
        expires_delta: Optional custom expiration time.
        claims: Extra profile claims (email, first_name, ...).

    Returns:
        str: Encoded JWT token.
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode = dict(claims or {})
    to_encode.update({"exp": expire, "sub": str(subject)})
    return jwt.encode(
        to_encode,
        settings.IDENTITY_JWT_SECRET,
        algorithm=settings.IDENTITY_JWT_ALGORITHM,
    )


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify a session token and return its claims.

    Args:
        token: The JWT token to verify.

    Returns:
        Optional[dict]: The claims if the token is valid and carries a
        subject, None otherwise.
    """
    try:
        payload = jwt.decode(
            token,
            settings.IDENTITY_JWT_SECRET,
            algorithms=[settings.IDENTITY_JWT_ALGORITHM],
        )
    except JWTError:
        return None

    if not payload.get("sub"):
        return None
    return payload
