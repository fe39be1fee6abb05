"""POST /api/auth/login -- exchange dashboard credentials for a bearer token."""
from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from src.auth.tokens import authenticate, create_access_token

router = APIRouter()


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    success: bool
    token: str
    email: str
    message: str


@router.post("/login", response_model=LoginResponse)
def login_endpoint(req: LoginRequest):
    """Validate credentials and issue a signed token (400 / 401 on failure)."""
    email = authenticate(req.email, req.password)
    return LoginResponse(
        success=True,
        token=create_access_token(email),
        email=email,
        message="Login successful",
    )
