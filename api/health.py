"""
Health check — confirms the backing store is reachable.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from auth.dependencies import get_database
from database.errors import StoreError
from database.session import DatabaseHandle

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(database: DatabaseHandle = Depends(get_database)) -> JSONResponse:
    try:
        await database.ping()
    except StoreError as exc:
        logger.warning("Health check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "database": "disconnected"},
        )
    return JSONResponse(content={"status": "ok", "database": "connected"})
