"""
Formulario Backend — Book Route Handlers
==========================================

What:  CRUD for /api/books. DELETE is a soft delete.
Who:   Called by the mobile client's library screens.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from formulario.database import get_db_session
from formulario.schemas.book import (
    BookCreateRequest,
    BookDeleteResponse,
    BookResponse,
    BookUpdateRequest,
)
from formulario.schemas.common import ErrorResponse
from formulario.services.book_service import book_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/books", tags=["Books"])

NOT_FOUND = {404: {"description": "Book not found or deleted", "model": ErrorResponse}}


@router.post("", status_code=201, response_model=BookResponse, summary="Create a book")
async def create_book(
    payload: BookCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    return await book_service.create_book(db, payload)


@router.get(
    "/user/{user_id}",
    response_model=List[BookResponse],
    summary="List a user's books",
    description="Non-deleted books of the user, most recently updated first.",
)
async def list_books_for_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[BookResponse]:
    return await book_service.list_books_for_user(db, user_id)


@router.get("/{book_uuid}", response_model=BookResponse, responses=NOT_FOUND, summary="Get a book")
async def get_book(
    book_uuid: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    return await book_service.get_book(db, book_uuid)


@router.put("/{book_uuid}", response_model=BookResponse, responses=NOT_FOUND, summary="Update a book")
async def update_book(
    book_uuid: UUID,
    payload: BookUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    return await book_service.update_book(db, book_uuid, payload)


@router.delete(
    "/{book_uuid}",
    response_model=BookDeleteResponse,
    responses=NOT_FOUND,
    summary="Soft-delete a book",
    description="Marks the book as deleted. Its formulas are left as they are.",
)
async def delete_book(
    book_uuid: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> BookDeleteResponse:
    return await book_service.delete_book(db, book_uuid)
