"""
Auth service — register a user, log a user in.

Both operations are single request/response calls with no state of
their own beyond the shared ``DatabaseHandle``.  Failures are raised as
``auth.errors.AuthError`` subclasses; the API layer turns them into
``{"success": false, "message": ...}`` payloads.
"""

from __future__ import annotations

import logging

from auth.errors import (
    AuthError,
    DuplicateUserError,
    InternalError,
    InvalidCredentialsError,
    StoreUnavailableError,
    ValidationError,
)
from auth.password import burn_verify_async, hash_password_async, verify_password_async
from database.errors import (
    DatabaseUnavailableError,
    DuplicateEntryError,
    StoreError,
    classify_db_error,
)
from database.session import DatabaseHandle
from database.users import NewUser, find_by_identifier, insert_user

logger = logging.getLogger(__name__)

REGISTER_OK = "Registration successful. Redirecting to login..."
LOGIN_OK = "Login successful!"
LOGIN_FIELDS_REQUIRED = "User ID/Email and password are required."


def _clean(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _translate(exc: BaseException, operation: str) -> AuthError:
    """Log a store failure in full and map it to a caller-safe error."""
    err = exc if isinstance(exc, StoreError) else classify_db_error(exc)
    if isinstance(err, DuplicateEntryError):
        return DuplicateUserError()
    logger.error("%s error: %s", operation, err, exc_info=exc)
    if isinstance(err, DatabaseUnavailableError):
        return StoreUnavailableError()
    return InternalError()


class AuthService:
    def __init__(self, database: DatabaseHandle) -> None:
        self._db = database

    async def register(
        self,
        user_id: str,
        name: str,
        email: str,
        phone: str,
        password: str,
    ) -> str:
        """
        Create a user and return the confirmation message.

        Raises ``ValidationError`` before touching the store when any field
        is missing or blank, ``DuplicateUserError`` when ``user_id`` or
        ``email`` is already taken.
        """
        fields = [_clean(v) for v in (user_id, name, email, phone, password)]
        if not all(fields):
            raise ValidationError()
        user_id, name, email, phone, _ = fields

        try:
            password_hash = await hash_password_async(password)
        except Exception as exc:
            logger.exception("Password hashing failed for user_id=%s", user_id)
            raise InternalError() from exc

        record = NewUser(
            user_id=user_id,
            name=name,
            email=email,
            phone=phone,
            password_hash=password_hash,
        )
        try:
            async with self._db.session() as session:
                user = await insert_user(session, record)
        except Exception as exc:
            raise _translate(exc, "Registration") from exc

        logger.info("Registered user %s (id=%s)", user.user_id, user.id)
        return REGISTER_OK

    async def login(self, identifier: str, password: str) -> str:
        """
        Verify *identifier* (user_id or email) and *password*.

        A missing user and a wrong password both raise the same
        ``InvalidCredentialsError``.
        """
        identifier = _clean(identifier)
        if not identifier or not isinstance(password, str) or not password:
            raise ValidationError(LOGIN_FIELDS_REQUIRED)

        try:
            async with self._db.session() as session:
                user = await find_by_identifier(session, identifier)
        except Exception as exc:
            raise _translate(exc, "Login") from exc

        if user is None:
            await burn_verify_async(password)
            logger.info("Login failed: unknown identifier")
            raise InvalidCredentialsError()

        if not await verify_password_async(password, user.password):
            logger.info("Login failed: bad password for user_id=%s", user.user_id)
            raise InvalidCredentialsError()

        logger.info("Login: %s (id=%s)", user.user_id, user.id)
        return LOGIN_OK
