"""
Errors surfaced to callers of the auth service.

Every ``AuthError`` carries a caller-safe ``message`` and the HTTP
``status_code`` the API layer should answer with.  Driver details are
logged where the error is raised, never attached here.
"""

from __future__ import annotations

from fastapi import status


class AuthError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All fields are required."


class DuplicateUserError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User ID or Email already exists."


class InvalidCredentialsError(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid User ID/Email or password."


class StoreUnavailableError(AuthError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Database connection failed. Please try again later."


class InternalError(AuthError):
    pass
