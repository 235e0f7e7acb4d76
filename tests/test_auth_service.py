"""
Tests for the register / login flow of the auth service.
"""

import asyncio

import pytest
from sqlalchemy import select
from unittest.mock import AsyncMock, MagicMock, patch

from auth.errors import (
    DuplicateUserError,
    InternalError,
    InvalidCredentialsError,
    StoreUnavailableError,
    ValidationError,
)
from auth.password import verify_password
from auth.service import LOGIN_OK, REGISTER_OK, AuthService
from config.settings import Settings
from database.errors import StoreError
from database.models import User
from database.session import DatabaseHandle

ALICE = {
    "user_id": "alice1",
    "name": "Alice",
    "email": "a@x.com",
    "phone": "555-0100",
    "password": "Secr3t!",
}


async def _rows(database) -> list:
    async with database.session() as session:
        return list((await session.execute(select(User))).scalars().all())


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_succeeds(self, service, database):
        assert await service.register(**ALICE) == REGISTER_OK
        rows = await _rows(database)
        assert len(rows) == 1
        assert rows[0].user_id == "alice1"

    @pytest.mark.asyncio
    async def test_password_stored_as_hash(self, service, database):
        await service.register(**ALICE)
        stored = (await _rows(database))[0].password
        assert stored != "Secr3t!"
        assert verify_password("Secr3t!", stored)

    @pytest.mark.asyncio
    async def test_fields_are_trimmed(self, service, database):
        await service.register(
            user_id="  bob  ", name=" Bob ", email=" b@x.com\t", phone=" 555 ", password="pw",
        )
        row = (await _rows(database))[0]
        assert (row.user_id, row.name, row.email, row.phone) == ("bob", "Bob", "b@x.com", "555")
        assert await service.login("bob", "pw") == LOGIN_OK

    @pytest.mark.asyncio
    async def test_password_is_not_trimmed(self, service):
        await service.register(**{**ALICE, "password": " padded "})
        assert await service.login("alice1", " padded ") == LOGIN_OK
        with pytest.raises(InvalidCredentialsError):
            await service.login("alice1", "padded")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["user_id", "name", "email", "phone", "password"])
    async def test_blank_field_rejected_without_insert(self, service, database, field):
        with pytest.raises(ValidationError, match="All fields are required"):
            await service.register(**{**ALICE, field: "   "})
        assert await _rows(database) == []

    @pytest.mark.asyncio
    async def test_missing_field_rejected(self, service):
        with pytest.raises(ValidationError):
            await service.register(**{**ALICE, "phone": None})

    @pytest.mark.asyncio
    async def test_validation_never_touches_store(self):
        handle = MagicMock(spec=DatabaseHandle)
        service = AuthService(handle)
        with patch("auth.service.hash_password_async", new_callable=AsyncMock) as mock_hash:
            with pytest.raises(ValidationError):
                await service.register(**{**ALICE, "email": ""})
        handle.session.assert_not_called()
        mock_hash.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_user_id(self, service, database):
        await service.register(**ALICE)
        with pytest.raises(DuplicateUserError) as exc_info:
            await service.register(**{**ALICE, "email": "other@x.com"})
        assert exc_info.value.message == "User ID or Email already exists."
        assert len(await _rows(database)) == 1

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service):
        await service.register(**ALICE)
        with pytest.raises(DuplicateUserError):
            await service.register(**{**ALICE, "user_id": "alice2"})

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_one_wins(self, service, database):
        results = await asyncio.gather(
            service.register(**ALICE),
            service.register(**{**ALICE, "email": "second@x.com"}),
            return_exceptions=True,
        )
        assert results.count(REGISTER_OK) == 1
        assert sum(isinstance(r, DuplicateUserError) for r in results) == 1
        assert len(await _rows(database)) == 1

    @pytest.mark.asyncio
    async def test_store_unavailable(self, broken_settings):
        service = AuthService(DatabaseHandle(broken_settings))
        with pytest.raises(StoreUnavailableError):
            await service.register(**ALICE)

    @pytest.mark.asyncio
    async def test_file_that_is_not_a_database_is_unavailable(self, tmp_path):
        junk = tmp_path / "junk.db"
        junk.write_bytes(b"this is not a sqlite database file" * 64)
        service = AuthService(DatabaseHandle(Settings(database_url=f"sqlite+aiosqlite:///{junk}")))
        with pytest.raises(StoreUnavailableError):
            await service.register(**ALICE)

    @pytest.mark.asyncio
    async def test_unexpected_store_failure_is_internal(self, service):
        with patch("auth.service.insert_user", side_effect=StoreError("driver fault")):
            with pytest.raises(InternalError) as exc_info:
                await service.register(**ALICE)
        assert "driver fault" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_hash_failure_is_internal(self, service, database):
        with patch("auth.service.hash_password_async", side_effect=RuntimeError("boom")):
            with pytest.raises(InternalError):
                await service.register(**ALICE)
        assert await _rows(database) == []


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_by_user_id(self, service):
        await service.register(**ALICE)
        assert await service.login("alice1", "Secr3t!") == LOGIN_OK

    @pytest.mark.asyncio
    async def test_login_by_email(self, service):
        await service.register(**ALICE)
        assert await service.login("a@x.com", "Secr3t!") == LOGIN_OK

    @pytest.mark.asyncio
    async def test_identifier_is_trimmed(self, service):
        await service.register(**ALICE)
        assert await service.login("  alice1 ", "Secr3t!") == LOGIN_OK

    @pytest.mark.asyncio
    async def test_wrong_password(self, service):
        await service.register(**ALICE)
        with pytest.raises(InvalidCredentialsError):
            await service.login("alice1", "wrong")

    @pytest.mark.asyncio
    async def test_unknown_and_wrong_password_look_the_same(self, service):
        await service.register(**ALICE)
        with pytest.raises(InvalidCredentialsError) as unknown:
            await service.login("ghost", "Secr3t!")
        with pytest.raises(InvalidCredentialsError) as wrong:
            await service.login("alice1", "wrong")
        assert unknown.value.message == wrong.value.message
        assert unknown.value.status_code == wrong.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier,password", [("", "pw"), ("   ", "pw"), ("alice1", ""), (None, "pw"), ("alice1", None)])
    async def test_missing_fields(self, service, identifier, password):
        with pytest.raises(ValidationError, match="User ID/Email and password are required"):
            await service.login(identifier, password)

    @pytest.mark.asyncio
    async def test_store_unavailable(self, broken_settings):
        service = AuthService(DatabaseHandle(broken_settings))
        with pytest.raises(StoreUnavailableError):
            await service.login("alice1", "Secr3t!")

    @pytest.mark.asyncio
    async def test_misconfigured_store_is_unavailable(self):
        service = AuthService(DatabaseHandle(Settings(database_url="postgresql://u:p@127.0.0.1:1/db")))
        with pytest.raises(StoreUnavailableError):
            await service.login("alice1", "Secr3t!")

    @pytest.mark.asyncio
    async def test_unexpected_store_failure_is_internal(self, service):
        with patch("auth.service.find_by_identifier", side_effect=StoreError("driver fault")):
            with pytest.raises(InternalError):
                await service.login("alice1", "Secr3t!")

    @pytest.mark.asyncio
    async def test_unknown_user_runs_dummy_check(self, service):
        with patch("auth.service.burn_verify_async", new_callable=AsyncMock) as mock_burn:
            with pytest.raises(InvalidCredentialsError):
                await service.login("ghost", "Secr3t!")
        mock_burn.assert_awaited_once_with("Secr3t!")

    @pytest.mark.asyncio
    async def test_wrong_password_skips_dummy_check(self, service):
        await service.register(**ALICE)
        with patch("auth.service.burn_verify_async", new_callable=AsyncMock) as mock_burn:
            with pytest.raises(InvalidCredentialsError):
                await service.login("alice1", "wrong")
        mock_burn.assert_not_awaited()


class TestScenario:
    @pytest.mark.asyncio
    async def test_register_then_login_paths(self, service):
        assert await service.register(**ALICE) == REGISTER_OK
        assert await service.login("alice1", "Secr3t!") == LOGIN_OK
        assert await service.login("a@x.com", "Secr3t!") == LOGIN_OK
        with pytest.raises(InvalidCredentialsError):
            await service.login("alice1", "wrong")
        with pytest.raises(DuplicateUserError):
            await service.register(**{**ALICE, "email": "new@x.com"})
