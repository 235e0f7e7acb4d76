"""
Credential store queries — insert a user, find one by user_id or email.

Uniqueness of ``user_id`` and ``email`` is enforced by the table
constraints only; nothing here checks before inserting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.errors import classify_db_error
from database.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewUser:
    """Already-trimmed registration fields plus the bcrypt hash."""

    user_id: str
    name: str
    email: str
    phone: str
    password_hash: str


async def insert_user(session: AsyncSession, record: NewUser) -> User:
    """
    Insert one ``users`` row.

    Raises ``DuplicateEntryError`` when ``user_id`` or ``email`` is taken,
    ``DatabaseUnavailableError`` on connectivity faults and ``StoreError``
    for anything else.
    """
    user = User(
        user_id=record.user_id,
        name=record.name,
        email=record.email,
        phone=record.phone,
        password=record.password_hash,
    )
    try:
        session.add(user)
        await session.flush()
    except Exception as exc:
        raise classify_db_error(exc) from exc
    return user


async def find_by_identifier(session: AsyncSession, identifier: str) -> Optional[User]:
    """Return the user whose ``user_id`` or ``email`` equals *identifier*."""
    try:
        result = await session.execute(
            select(User)
            .where(or_(User.user_id == identifier, User.email == identifier))
            .limit(1)
        )
    except Exception as exc:
        raise classify_db_error(exc) from exc
    return result.scalar_one_or_none()
