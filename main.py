"""
Credential registration & login service — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.health import router as health_router
from api.middleware import register_exception_handlers, register_middleware
from auth.routes import router as auth_router
from config.settings import config
from database.errors import StoreError
from database.session import DatabaseHandle

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("sqlalchemy.engine", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(database: DatabaseHandle | None = None) -> FastAPI:
    app = FastAPI(
        title="Auth Service",
        version="1.0.0",
        description="User registration and login backed by a relational store.",
    )
    app.state.database = database or DatabaseHandle(config)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api")
    app.include_router(health_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup():
        try:
            await app.state.database.open()
        except StoreError:
            # The handle is FAILED; the next request retries the open.
            logger.error("Database not ready at startup; will retry on first request.")
            return
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.database.close()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
