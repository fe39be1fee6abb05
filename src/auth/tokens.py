"""
Dashboard authentication -- credential check and signed access tokens.

Users are the configured ``dashboard_users`` (email -> password).  A
successful login yields an HS256 JWT whose ``sub`` is the user's email.
"""
from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from src.core.config import get_settings
from src.core.errors import AuthError, ValidationError
from src.core.logging import get_logger

logger = get_logger(__name__)

ALGORITHM = "HS256"


def authenticate(email: str | None, password: str | None) -> str:
    """Return the email of the user matching the credentials.

    Raises
    ------
    ValidationError
        If either field is missing.
    AuthError
        If the email is unknown or the password does not match.
    """
    if not email or not password:
        raise ValidationError("Email and password required")

    expected = get_settings().dashboard_users.get(email)
    if expected is None or not hmac.compare_digest(expected.encode(), password.encode()):
        logger.warning("Login rejected for %s", email)
        raise AuthError("Invalid credentials", status_code=401)

    logger.info("Login succeeded for %s", email)
    return email


def create_access_token(email: str, expires_hours: int | None = None) -> str:
    """Create a signed JWT for *email*."""
    settings = get_settings()
    if expires_hours is None:
        expires_hours = settings.jwt_expires_hours
    now = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": email,
        "email": email,
        "login_time": now.isoformat(),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=expires_hours)).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Validate *token* and return its claims.

    Raises ``AuthError`` (403) when the signature is wrong, the token is
    malformed or it has expired.
    """
    try:
        claims = jwt.decode(token, get_settings().jwt_secret, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.warning("Token rejected: %s", exc)
        raise AuthError("Invalid token", status_code=403) from exc

    if not claims.get("sub"):
        raise AuthError("Invalid token", status_code=403)
    return claims
