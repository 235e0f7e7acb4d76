"""
Typed failures raised by the credential store.

Driver and SQLAlchemy exceptions are classified here, by type, so callers
never have to inspect error messages or driver codes.
"""

from __future__ import annotations

import asyncio

from sqlalchemy import exc as sa_exc


class StoreError(Exception):
    """Any failure talking to the backing store."""


class DuplicateEntryError(StoreError):
    """A write violated a uniqueness constraint."""


class DatabaseUnavailableError(StoreError):
    """The backing store is unreachable or misconfigured."""


_UNAVAILABLE_TYPES = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.DisconnectionError,
    sa_exc.TimeoutError,        # pool checkout timed out
    sa_exc.ArgumentError,       # malformed database URL
    sa_exc.NoSuchModuleError,   # unknown dialect / driver
    asyncio.TimeoutError,
    TimeoutError,
    OSError,                    # refused, reset, unknown host
)


def classify_db_error(exc: BaseException) -> StoreError:
    """Map a raw driver / SQLAlchemy exception onto the store taxonomy."""
    if isinstance(exc, StoreError):
        return exc
    if isinstance(exc, sa_exc.IntegrityError):
        return DuplicateEntryError(str(exc.orig) if exc.orig is not None else str(exc))
    if isinstance(exc, _UNAVAILABLE_TYPES):
        return DatabaseUnavailableError(str(exc))
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return DatabaseUnavailableError(str(exc))
    return StoreError(str(exc))
