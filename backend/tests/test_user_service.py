"""
Formulario Backend — User Service Tests
=========================================

What we test:
    ✅ First upsert creates the user, later upserts refresh the profile
    ✅ is_guest is only set on creation
    ✅ Lookup by id and by email, NotFoundError when missing
    ✅ Session failures surface as DatabaseError
"""

import pytest

from formulario.exceptions import DatabaseError, NotFoundError
from formulario.schemas.user import UserUpsertRequest
from formulario.services.user_service import UserService


class TestUserUpsert:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_creates_user(self, db_session):
        payload = UserUpsertRequest(id="uid-1", name="Ada", email="ada@example.com", is_guest=True)

        user = await self.service.upsert_user(db_session, payload)

        assert user.id == "uid-1"
        assert user.email == "ada@example.com"
        assert user.is_guest is True

    @pytest.mark.asyncio
    async def test_second_upsert_updates_profile_but_not_guest_flag(self, db_session):
        await self.service.upsert_user(db_session, UserUpsertRequest(id="uid-1", name="Guest", is_guest=True))

        user = await self.service.upsert_user(
            db_session,
            UserUpsertRequest(id="uid-1", name="Ada Lovelace", email="ada@example.com", is_guest=False),
        )

        assert user.name == "Ada Lovelace"
        assert user.email == "ada@example.com"
        assert user.is_guest is True

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.upsert_user(mock_db_session, UserUpsertRequest(id="uid-1"))

        assert exc_info.value.context == {"user_id": "uid-1"}


class TestUserLookup:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_get_by_id(self, db_session, seed):
        await seed(user_id="uid-7")
        user = await self.service.get_user(db_session, "uid-7")
        assert user.name == "Ada"

    @pytest.mark.asyncio
    async def test_get_by_email(self, db_session, seed):
        await seed(user_id="uid-7")
        user = await self.service.get_user_by_email(db_session, "uid-7@example.com")
        assert user.id == "uid-7"

    @pytest.mark.asyncio
    async def test_missing_user(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_user(db_session, "nobody")
        assert exc_info.value.message == "Usuario no encontrado"

    @pytest.mark.asyncio
    async def test_missing_email(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_user_by_email(db_session, "nobody@example.com")
