"""
Formulario Backend — Formula Service
======================================

What:  CRUD for formulas plus the record selection behind PDF exports.
Why:   Keeps every formula query (soft-delete filter, ordering, book join)
       in one place, so the renderer only ever sees clean, ordered input.
Who:   Called by the /api/formulas and /api/pdf route handlers.

Ordering Rules:
    - Listing routes: updated_at DESC (most recently edited first)
    - Recent formulas: created_at DESC, capped at 50
    - Exports: created_at ASC; a custom selection keeps database order, not
      the order of the requested uuids
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import asc, desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from formulario.exceptions import DatabaseError, FormularioError, NotFoundError, ValidationError
from formulario.models.book import Book
from formulario.models.formula import Formula
from formulario.schemas.formula import (
    BookRef,
    FormulaCreateRequest,
    FormulaDeleteResponse,
    FormulaResponse,
    FormulaSummary,
    FormulaSummaryList,
    FormulaUpdateRequest,
)
from formulario.services.book_service import book_service

logger = logging.getLogger(__name__)

FORMULA_NOT_FOUND = "Fórmula no encontrada"
BOOK_HAS_NO_FORMULAS = "No se encontraron fórmulas en este libro"
NO_FORMULAS_FOUND = "No se encontraron fórmulas"
RECENT_LIMIT = 50


def to_response(formula: Formula, book: Optional[Book] = None) -> FormulaResponse:
    """Serialize a formula; `book` is embedded as {name, uuid} when given."""
    return FormulaResponse(
        id=formula.id,
        uuid=formula.uuid,
        book_id=formula.book_id,
        user_id=formula.user_id,
        name=formula.name,
        formula_text=formula.formula_text,
        description=formula.description,
        image_uri=formula.image_uri,
        is_deleted=formula.is_deleted,
        created_at=formula.created_at,
        updated_at=formula.updated_at,
        book=BookRef(name=book.name, uuid=book.uuid) if book is not None else None,
    )


class FormulaService:
    """
    Business logic layer for formula operations.

    Reads that return FormulaResponse load the owning book in the same
    query (joinedload), because relationships never lazy-load.
    """

    def _active(self):
        return (
            select(Formula)
            .options(joinedload(Formula.book))
            .where(Formula.is_deleted.is_(False))
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_formula(self, db: AsyncSession, payload: FormulaCreateRequest) -> FormulaResponse:
        try:
            formula = Formula(
                book_id=payload.book_id,
                user_id=payload.user_id,
                name=payload.name,
                formula_text=payload.formula_text,
                description=payload.description,
                image_uri=payload.image_uri,
            )
            db.add(formula)
            await db.flush()
            logger.info("Formula %s created in book %d", formula.uuid, formula.book_id)
            return to_response(formula)
        except FormularioError:
            raise
        except Exception as e:
            logger.error("Database error creating formula: %s", str(e), exc_info=True)
            raise DatabaseError(context={"book_id": payload.book_id})

    async def update_formula(
        self,
        db: AsyncSession,
        formula_uuid: UUID,
        payload: FormulaUpdateRequest,
    ) -> FormulaResponse:
        formula = await self._get_active(db, formula_uuid)
        try:
            formula.name = payload.name
            formula.formula_text = payload.formula_text
            formula.description = payload.description
            formula.image_uri = payload.image_uri
            formula.updated_at = datetime.now(timezone.utc)
            await db.flush()
            logger.info("Formula %s updated", formula.uuid)
            return to_response(formula, formula.book)
        except Exception as e:
            logger.error("Database error updating formula %s: %s", formula_uuid, str(e), exc_info=True)
            raise DatabaseError(context={"formula_uuid": str(formula_uuid)})

    async def delete_formula(self, db: AsyncSession, formula_uuid: UUID) -> FormulaDeleteResponse:
        """Soft delete; matches already-deleted rows as well."""
        try:
            result = await db.execute(
                select(Formula)
                .options(joinedload(Formula.book))
                .where(Formula.uuid == formula_uuid)
            )
            formula = result.scalar_one_or_none()
            if formula is None:
                raise NotFoundError(FORMULA_NOT_FOUND, resource="formula", resource_id=str(formula_uuid))

            formula.is_deleted = True
            formula.updated_at = datetime.now(timezone.utc)
            await db.flush()
            logger.info("Formula %s soft-deleted", formula.uuid)
            return FormulaDeleteResponse(formula=to_response(formula, formula.book))
        except FormularioError:
            raise
        except Exception as e:
            logger.error("Database error deleting formula %s: %s", formula_uuid, str(e), exc_info=True)
            raise DatabaseError(context={"formula_uuid": str(formula_uuid)})

    # ── Reads ─────────────────────────────────────────────────────────────

    async def _get_active(self, db: AsyncSession, formula_uuid: UUID) -> Formula:
        try:
            result = await db.execute(self._active().where(Formula.uuid == formula_uuid))
            formula = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching formula %s: %s", formula_uuid, str(e))
            raise DatabaseError(context={"formula_uuid": str(formula_uuid)})

        if formula is None:
            raise NotFoundError(FORMULA_NOT_FOUND, resource="formula", resource_id=str(formula_uuid))
        return formula

    async def get_formula(self, db: AsyncSession, formula_uuid: UUID) -> FormulaResponse:
        formula = await self._get_active(db, formula_uuid)
        return to_response(formula, formula.book)

    async def get_formula_for_export(self, db: AsyncSession, formula_uuid: UUID) -> Tuple[Formula, str]:
        """The formula row and its book name, ready for the single-formula PDF."""
        formula = await self._get_active(db, formula_uuid)
        return formula, formula.book.name

    async def list_recent_formulas(self, db: AsyncSession, limit: int = RECENT_LIMIT) -> FormulaSummaryList:
        try:
            result = await db.execute(
                select(Formula)
                .where(Formula.is_deleted.is_(False))
                .order_by(desc(Formula.created_at))
                .limit(limit)
            )
            return FormulaSummaryList(
                formulas=[FormulaSummary.model_validate(f) for f in result.scalars().all()]
            )
        except Exception as e:
            logger.error("Database error listing recent formulas: %s", str(e), exc_info=True)
            raise DatabaseError(context={"limit": limit})

    async def _list(self, db: AsyncSession, *criteria) -> List[FormulaResponse]:
        try:
            result = await db.execute(
                self._active().where(*criteria).order_by(desc(Formula.updated_at))
            )
            return [to_response(f, f.book) for f in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing formulas: %s", str(e), exc_info=True)
            raise DatabaseError()

    async def list_formulas_for_book(self, db: AsyncSession, book_id: int) -> List[FormulaResponse]:
        """By internal book id; an unknown id is an empty list, not a 404."""
        return await self._list(db, Formula.book_id == book_id)

    async def list_formulas_for_book_uuid(self, db: AsyncSession, book_uuid: UUID) -> List[FormulaResponse]:
        book = await book_service.get_active_book(db, book_uuid)
        return await self._list(db, Formula.book_id == book.id)

    async def list_formulas_for_user(self, db: AsyncSession, user_id: str) -> List[FormulaResponse]:
        return await self._list(db, Formula.user_id == user_id)

    # ── Export selection ──────────────────────────────────────────────────

    async def formulas_for_book_export(self, db: AsyncSession, book_uuid: UUID) -> Tuple[Book, List[Formula]]:
        """
        The book and its formulas, oldest first.

        Raises:
            NotFoundError: book missing/deleted, or it has no active formulas
        """
        book = await book_service.get_active_book(db, book_uuid)
        try:
            result = await db.execute(
                select(Formula)
                .where(Formula.book_id == book.id, Formula.is_deleted.is_(False))
                .order_by(asc(Formula.created_at))
            )
            formulas = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error loading formulas of book %s: %s", book_uuid, str(e))
            raise DatabaseError(context={"book_uuid": str(book_uuid)})

        if not formulas:
            raise NotFoundError(BOOK_HAS_NO_FORMULAS, resource="formula", resource_id=str(book_uuid))
        return book, formulas

    async def formulas_by_uuids(self, db: AsyncSession, formula_uuids: Sequence[UUID]) -> List[Formula]:
        """
        Active formulas whose uuid is in the set, oldest first.

        Raises:
            ValidationError: empty selection
            NotFoundError: none of the uuids match an active formula
        """
        if not formula_uuids:
            raise ValidationError("Se requiere un array de formula_uuids", field="formula_uuids")
        try:
            result = await db.execute(
                select(Formula)
                .where(Formula.uuid.in_(list(formula_uuids)), Formula.is_deleted.is_(False))
                .order_by(asc(Formula.created_at))
            )
            formulas = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error loading custom formula selection: %s", str(e))
            raise DatabaseError(context={"requested": len(formula_uuids)})

        if not formulas:
            raise NotFoundError(NO_FORMULAS_FOUND, resource="formula")
        return formulas


# ── Singleton Instance ────────────────────────────────────────────────────
formula_service = FormulaService()
