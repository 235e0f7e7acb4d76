"""
Auth API routes — register, login.

Route prefix: /api
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from auth.dependencies import get_auth_service
from auth.service import AuthService


router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────
# Fields are left loosely typed: a missing or non-string value is reported
# by the service as a ValidationError, not as a framework 422.


class RegisterRequest(BaseModel):
    user_id: Any = None
    name: Any = None
    email: Any = None
    phone: Any = None
    password: Any = None


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    login_id: Any = Field(default=None, alias="loginId")
    password: Any = None


class AuthResponse(BaseModel):
    success: bool
    message: str


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user (user_id, name, email, phone, password)."""
    message = await service.register(
        req.user_id, req.name, req.email, req.phone, req.password,
    )
    return AuthResponse(success=True, message=message)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login with user_id or email (``loginId``) + password."""
    message = await service.login(req.login_id, req.password)
    return AuthResponse(success=True, message=message)
