"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic salting and a
configurable work factor (``config.bcrypt_rounds``, default 10).
The async variants push the deliberately slow bcrypt work onto a
worker thread so the event loop keeps serving other requests.
"""

from __future__ import annotations

import asyncio

import bcrypt

from config.settings import config

# bcrypt only reads the first 72 bytes; newer releases reject longer input.
_MAX_PASSWORD_BYTES = 72

_DUMMY_HASH = bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(rounds=config.bcrypt_rounds)).decode()


def _encode(password: str) -> bytes:
    return password.encode()[:_MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt (auto-salted)."""
    salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except (ValueError, TypeError):
        return False


def burn_verify(password: str) -> None:
    """Run a throwaway check so a missing user costs about as much as a wrong password."""
    verify_password(password, _DUMMY_HASH)


async def hash_password_async(password: str) -> str:
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, password_hash)


async def burn_verify_async(password: str) -> None:
    await asyncio.to_thread(burn_verify, password)
