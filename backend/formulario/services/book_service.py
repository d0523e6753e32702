"""
Formulario Backend — Book Service
===================================

What:  CRUD for books with soft delete.
Why:   Books are the grouping users browse and export; deleting one only
       hides it, so formulas that reference it stay intact.
Who:   Called by the /api/books routes and by FormulaService for export.

Soft Delete Rules:
    - Every read and update filters on is_deleted = false
    - Delete flips is_deleted and bumps updated_at; it matches deleted rows
      too, so deleting twice is not a 404
"""

import logging
from datetime import datetime, timezone
from typing import List
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from formulario.exceptions import DatabaseError, FormularioError, NotFoundError
from formulario.models.book import Book
from formulario.schemas.book import (
    BookCreateRequest,
    BookDeleteResponse,
    BookResponse,
    BookUpdateRequest,
)

logger = logging.getLogger(__name__)

BOOK_NOT_FOUND = "Libro no encontrado"


class BookService:
    """Business logic layer for book operations."""

    async def create_book(self, db: AsyncSession, payload: BookCreateRequest) -> BookResponse:
        try:
            book = Book(
                user_id=payload.user_id,
                name=payload.name,
                description=payload.description,
                image_uri=payload.image_uri,
            )
            db.add(book)
            await db.flush()
            logger.info("Book %s created for user %s", book.uuid, book.user_id)
            return BookResponse.model_validate(book)
        except FormularioError:
            raise
        except Exception as e:
            logger.error("Database error creating book: %s", str(e), exc_info=True)
            raise DatabaseError(context={"user_id": payload.user_id})

    async def list_books_for_user(self, db: AsyncSession, user_id: str) -> List[BookResponse]:
        """Non-deleted books of a user, most recently updated first."""
        try:
            result = await db.execute(
                select(Book)
                .where(Book.user_id == user_id, Book.is_deleted.is_(False))
                .order_by(desc(Book.updated_at))
            )
            return [BookResponse.model_validate(book) for book in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing books for %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def get_active_book(self, db: AsyncSession, book_uuid: UUID) -> Book:
        """
        ORM row of a non-deleted book.

        Shared with FormulaService, which needs the integer id for joins.

        Raises:
            NotFoundError: unknown uuid or soft-deleted book
        """
        try:
            result = await db.execute(
                select(Book).where(Book.uuid == book_uuid, Book.is_deleted.is_(False))
            )
            book = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching book %s: %s", book_uuid, str(e))
            raise DatabaseError(context={"book_uuid": str(book_uuid)})

        if book is None:
            raise NotFoundError(BOOK_NOT_FOUND, resource="book", resource_id=str(book_uuid))
        return book

    async def get_book(self, db: AsyncSession, book_uuid: UUID) -> BookResponse:
        book = await self.get_active_book(db, book_uuid)
        return BookResponse.model_validate(book)

    async def update_book(
        self,
        db: AsyncSession,
        book_uuid: UUID,
        payload: BookUpdateRequest,
    ) -> BookResponse:
        book = await self.get_active_book(db, book_uuid)
        try:
            book.name = payload.name
            book.description = payload.description
            book.image_uri = payload.image_uri
            book.updated_at = datetime.now(timezone.utc)
            await db.flush()
            logger.info("Book %s updated", book.uuid)
            return BookResponse.model_validate(book)
        except Exception as e:
            logger.error("Database error updating book %s: %s", book_uuid, str(e), exc_info=True)
            raise DatabaseError(context={"book_uuid": str(book_uuid)})

    async def delete_book(self, db: AsyncSession, book_uuid: UUID) -> BookDeleteResponse:
        """Soft delete. Formulas of the book are not touched."""
        try:
            result = await db.execute(select(Book).where(Book.uuid == book_uuid))
            book = result.scalar_one_or_none()
            if book is None:
                raise NotFoundError(BOOK_NOT_FOUND, resource="book", resource_id=str(book_uuid))

            book.is_deleted = True
            book.updated_at = datetime.now(timezone.utc)
            await db.flush()
            logger.info("Book %s soft-deleted", book.uuid)
            return BookDeleteResponse(book=BookResponse.model_validate(book))
        except FormularioError:
            raise
        except Exception as e:
            logger.error("Database error deleting book %s: %s", book_uuid, str(e), exc_info=True)
            raise DatabaseError(context={"book_uuid": str(book_uuid)})


# ── Singleton Instance ────────────────────────────────────────────────────
book_service = BookService()
