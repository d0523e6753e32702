"""
Formulario Backend — Book Service Tests
=========================================

What we test:
    ✅ Create, read and update of active books
    ✅ Soft-deleted books are invisible to reads, updates and listings
    ✅ Deleting sets the flag and is repeatable
    ✅ Listing order: most recently updated first
"""

from uuid import uuid4

import pytest

from formulario.exceptions import DatabaseError, NotFoundError
from formulario.schemas.book import BookCreateRequest, BookUpdateRequest
from formulario.services.book_service import BookService


class TestBookService:

    def setup_method(self):
        self.service = BookService()

    @pytest.mark.asyncio
    async def test_create_book_assigns_uuid(self, db_session, seed):
        await seed()

        book = await self.service.create_book(
            db_session, BookCreateRequest(user_id="user-1", name="Geometry")
        )

        assert book.uuid is not None
        assert book.is_deleted is False
        assert (await self.service.get_book(db_session, book.uuid)).name == "Geometry"

    @pytest.mark.asyncio
    async def test_list_is_most_recently_updated_first(self, db_session, seed):
        await seed(books=["Old", "Middle", "New"])

        books = await self.service.list_books_for_user(db_session, "user-1")

        assert [b.name for b in books] == ["New", "Middle", "Old"]

    @pytest.mark.asyncio
    async def test_list_excludes_deleted_and_other_users(self, db_session, seed):
        await seed(books=["Kept", "Gone"], deleted_books=["Gone"])
        await seed(books=["Theirs"], user_id="user-2")

        books = await self.service.list_books_for_user(db_session, "user-1")

        assert [b.name for b in books] == ["Kept"]

    @pytest.mark.asyncio
    async def test_update_book(self, db_session, seed):
        data = await seed(books=["Draft"])

        book = await self.service.update_book(
            db_session,
            data.books["Draft"].uuid,
            BookUpdateRequest(name="Final", description="Reviewed"),
        )

        assert book.name == "Final"
        assert book.description == "Reviewed"

    @pytest.mark.asyncio
    async def test_soft_deleted_book_is_not_found(self, db_session, seed):
        data = await seed(books=["Gone"], deleted_books=["Gone"])
        book_uuid = data.books["Gone"].uuid

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_book(db_session, book_uuid)
        assert exc_info.value.message == "Libro no encontrado"

        with pytest.raises(NotFoundError):
            await self.service.update_book(db_session, book_uuid, BookUpdateRequest(name="Back"))

    @pytest.mark.asyncio
    async def test_delete_is_soft_and_repeatable(self, db_session, seed):
        data = await seed(books=["Geometry"])
        book_uuid = data.books["Geometry"].uuid

        first = await self.service.delete_book(db_session, book_uuid)
        second = await self.service.delete_book(db_session, book_uuid)

        assert first.message == "Libro eliminado correctamente"
        assert first.book.is_deleted is True
        assert second.book.is_deleted is True
        assert await self.service.list_books_for_user(db_session, "user-1") == []

    @pytest.mark.asyncio
    async def test_delete_unknown_book(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_book(db_session, uuid4())

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = RuntimeError("connection reset")
        with pytest.raises(DatabaseError):
            await self.service.get_book(mock_db_session, uuid4())
