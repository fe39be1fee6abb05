"""
Shared FastAPI dependencies.
"""
from __future__ import annotations

from fastapi import Header

from src.auth.tokens import decode_access_token
from src.core.errors import AuthError


def get_current_user(authorization: str | None = Header(default=None)) -> str:
    """Resolve the caller's email from an ``Authorization: Bearer <jwt>`` header."""
    token = None
    if authorization:
        parts = authorization.split(" ", 1)
        token = parts[1].strip() if len(parts) == 2 else None

    if not token:
        raise AuthError("Token required", status_code=401)

    return decode_access_token(token)["sub"]
