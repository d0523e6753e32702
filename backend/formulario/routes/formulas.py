"""
Formulario Backend — Formula Route Handlers
=============================================

What:  CRUD and listings for /api/formulas. DELETE is a soft delete.
Who:   Called by the mobile client's book and search screens.

Route order matters only for single-segment paths: GET /api/formulas/{uuid}
is declared after the /book, /book-uuid and /user prefixes, which all have
two segments and therefore never collide with it.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from formulario.database import get_db_session
from formulario.schemas.common import ErrorResponse
from formulario.schemas.formula import (
    FormulaCreateRequest,
    FormulaDeleteResponse,
    FormulaResponse,
    FormulaSummaryList,
    FormulaUpdateRequest,
)
from formulario.services.formula_service import formula_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/formulas", tags=["Formulas"])

NOT_FOUND = {404: {"description": "Formula not found or deleted", "model": ErrorResponse}}


@router.post("", status_code=201, response_model=FormulaResponse, summary="Create a formula")
async def create_formula(
    payload: FormulaCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> FormulaResponse:
    return await formula_service.create_formula(db, payload)


@router.get(
    "",
    response_model=FormulaSummaryList,
    summary="Latest formulas",
    description="The 50 most recently created non-deleted formulas (summary fields only).",
)
async def list_recent_formulas(db: AsyncSession = Depends(get_db_session)) -> FormulaSummaryList:
    return await formula_service.list_recent_formulas(db)


@router.get(
    "/book/{book_id}",
    response_model=List[FormulaResponse],
    summary="Formulas of a book (internal id)",
)
async def list_formulas_for_book(
    book_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[FormulaResponse]:
    return await formula_service.list_formulas_for_book(db, book_id)


@router.get(
    "/book-uuid/{book_uuid}",
    response_model=List[FormulaResponse],
    responses={404: {"description": "Book not found or deleted", "model": ErrorResponse}},
    summary="Formulas of a book (public uuid)",
)
async def list_formulas_for_book_uuid(
    book_uuid: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> List[FormulaResponse]:
    return await formula_service.list_formulas_for_book_uuid(db, book_uuid)


@router.get(
    "/user/{user_id}",
    response_model=List[FormulaResponse],
    summary="Formulas of a user",
)
async def list_formulas_for_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[FormulaResponse]:
    return await formula_service.list_formulas_for_user(db, user_id)


@router.get("/{formula_uuid}", response_model=FormulaResponse, responses=NOT_FOUND, summary="Get a formula")
async def get_formula(
    formula_uuid: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> FormulaResponse:
    return await formula_service.get_formula(db, formula_uuid)


@router.put("/{formula_uuid}", response_model=FormulaResponse, responses=NOT_FOUND, summary="Update a formula")
async def update_formula(
    formula_uuid: UUID,
    payload: FormulaUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> FormulaResponse:
    return await formula_service.update_formula(db, formula_uuid, payload)


@router.delete(
    "/{formula_uuid}",
    response_model=FormulaDeleteResponse,
    responses=NOT_FOUND,
    summary="Soft-delete a formula",
)
async def delete_formula(
    formula_uuid: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> FormulaDeleteResponse:
    return await formula_service.delete_formula(db, formula_uuid)
