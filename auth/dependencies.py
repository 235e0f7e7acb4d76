"""
FastAPI dependencies for authentication.

Provides ``get_database`` and ``get_auth_service``, both resolved from
the objects ``main.create_app`` places on ``app.state``.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth.service import AuthService
from database.session import DatabaseHandle


def get_database(request: Request) -> DatabaseHandle:
    """Return the process-wide store handle."""
    return request.app.state.database


def get_auth_service(database: DatabaseHandle = Depends(get_database)) -> AuthService:
    return AuthService(database)
