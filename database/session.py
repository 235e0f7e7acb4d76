"""
Async SQLAlchemy store handle with an explicit open / close lifecycle.

A single ``DatabaseHandle`` is shared by the whole process.  It moves
through a small state machine::

    UNINITIALIZED ──open()──► READY
          ▲                     │
          │                  close()
          │                     ▼
          └──── next call ◄── FAILED   (open() raised)

``ensure_ready()`` opens the handle lazily and, when a previous attempt
failed, resets to ``UNINITIALIZED`` and tries again.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import Settings, config
from database.errors import DatabaseUnavailableError, classify_db_error
from database.models import Base

logger = logging.getLogger(__name__)


class HandleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


def _engine_kwargs(settings: Settings, backend: str, driver: str) -> dict:
    kwargs: dict = {"echo": settings.db_echo}
    if backend == "sqlite":
        # SQLite pools are per-file; QueuePool sizing arguments do not apply.
        return kwargs

    kwargs.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
    )
    if driver == "asyncpg":
        kwargs["connect_args"] = {"timeout": settings.db_connect_timeout}
    elif driver in ("aiomysql", "asyncmy"):
        kwargs["connect_args"] = {"connect_timeout": int(settings.db_connect_timeout)}
    return kwargs


class DatabaseHandle:
    """Process-wide owner of the async engine and session factory."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or config
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._state = HandleState.UNINITIALIZED
        self._last_error: Optional[BaseException] = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseUnavailableError("Database handle is not open")
        return self._engine

    async def open(self) -> None:
        """
        Build the engine, verify connectivity and create the ``users``
        table if it is missing.

        Raises ``DatabaseUnavailableError`` on any failure and leaves the
        handle in ``FAILED``.
        """
        async with self._lock:
            if self._state is HandleState.READY:
                return
            if self._state is HandleState.FAILED:
                self._state = HandleState.UNINITIALIZED
            await self._open_locked()

    async def ensure_ready(self) -> None:
        """Open on first use; retry if the previous open failed."""
        if self._state is HandleState.READY:
            return
        await self.open()

    async def close(self) -> None:
        async with self._lock:
            if self._engine is not None:
                await self._engine.dispose()
                logger.info("Database engine disposed")
            self._engine = None
            self._session_factory = None
            self._state = HandleState.UNINITIALIZED

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session bound to the pool, committing on success and
        rolling back on any error.
        """
        await self.ensure_ready()
        factory = self._session_factory
        if factory is None:
            raise DatabaseUnavailableError("Database handle is not open")
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        """Round-trip ``SELECT 1``; raises a ``StoreError`` on failure."""
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
        except Exception as exc:
            raise classify_db_error(exc) from exc

    async def _open_locked(self) -> None:
        engine: Optional[AsyncEngine] = None
        try:
            url = make_url(self._settings.database_url)
            engine = create_async_engine(
                url,
                **_engine_kwargs(self._settings, url.get_backend_name(), url.get_driver_name()),
            )
            async with engine.begin() as conn:
                logger.info("Connected to database (%s)", url.get_backend_name())
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Table ready")
        except Exception as exc:
            if engine is not None:
                await engine.dispose()
            self._state = HandleState.FAILED
            self._last_error = exc
            logger.error("Database initialization failed: %s", exc)
            # Any failure to open means the store is unreachable or misconfigured.
            if isinstance(exc, DatabaseUnavailableError):
                raise
            raise DatabaseUnavailableError(str(exc)) from exc

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._state = HandleState.READY
        self._last_error = None
