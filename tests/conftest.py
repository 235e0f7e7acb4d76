"""
Shared fixtures: a throwaway SQLite store and the services built on it.
"""

import os

# Cheap bcrypt work factor for the test run; must be set before config loads.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio

from auth.service import AuthService
from config.settings import Settings
from database.session import DatabaseHandle


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")


@pytest.fixture
def broken_settings(tmp_path) -> Settings:
    """Points at a directory that does not exist, so every connect fails."""
    return Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'users.db'}")


@pytest_asyncio.fixture
async def database(settings):
    handle = DatabaseHandle(settings)
    await handle.open()
    yield handle
    await handle.close()


@pytest.fixture
def service(database) -> AuthService:
    return AuthService(database)
