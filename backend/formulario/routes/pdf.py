"""
Formulario Backend — PDF Download Route Handlers
==================================================

What:  GET /api/pdf/formula/{uuid}, GET /api/pdf/book/{book_uuid}, POST /api/pdf/custom.
Why:   Users print or share formulas as documents.
How:   Fetch records through FormulaService, render with PDFService in the
       threadpool (reportlab is CPU-bound and synchronous), return the bytes
       as an attachment.

Request Flow:
    1. Resolve records (404 when nothing matches, soft-deleted rows excluded)
    2. Render the whole document in memory
    3. Respond with application/pdf + Content-Disposition + Content-Length

Error responses (handled by global exception handlers):
    HTTP 400: Empty custom selection (ValidationError)
    HTTP 404: Formula/book missing or book without formulas (NotFoundError)
    HTTP 500: Rendering failed (DocumentGenerationError) or database failure
"""

import logging
import re
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from formulario.database import get_db_session
from formulario.schemas.common import ErrorResponse
from formulario.schemas.formula import DEFAULT_CUSTOM_TITLE, CustomPDFRequest
from formulario.services.formula_service import formula_service
from formulario.services.pdf_service import pdf_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pdf", tags=["PDF"])

PDF_RESPONSES = {
    200: {"description": "PDF document", "content": {"application/pdf": {}}},
    404: {"description": "Records not found", "model": ErrorResponse},
    500: {"description": "Generation or lookup failure", "model": ErrorResponse},
}

CUSTOM_FILENAME = "formulas-personalizadas.pdf"


def slugify_filename(name: str) -> str:
    """Every character outside [A-Za-z0-9] becomes "_", then lowercase."""
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower()


def pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(content)),
        },
    )


@router.get(
    "/formula/{formula_uuid}",
    response_class=Response,
    responses=PDF_RESPONSES,
    summary="Download one formula as PDF",
)
async def formula_pdf(
    formula_uuid: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    formula, book_name = await formula_service.get_formula_for_export(db, formula_uuid)
    pdf = await run_in_threadpool(pdf_service.generate_formula_pdf, formula, book_name)
    return pdf_response(pdf, f"formula-{slugify_filename(formula.name)}.pdf")


@router.get(
    "/book/{book_uuid}",
    response_class=Response,
    responses=PDF_RESPONSES,
    summary="Download every formula of a book as PDF",
    description="Formulas appear in creation order, oldest first.",
)
async def book_pdf(
    book_uuid: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    book, formulas = await formula_service.formulas_for_book_export(db, book_uuid)
    pdf = await run_in_threadpool(pdf_service.generate_collection_pdf, book.name, formulas)
    return pdf_response(pdf, f"libro-{slugify_filename(book.name)}.pdf")


@router.post(
    "/custom",
    response_class=Response,
    responses={**PDF_RESPONSES, 400: {"description": "Empty selection", "model": ErrorResponse}},
    summary="Download a custom selection of formulas as PDF",
    description=(
        "Formulas appear in creation order as returned by the database, "
        "not in the order of `formula_uuids`."
    ),
)
async def custom_pdf(
    payload: CustomPDFRequest,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    formulas = await formula_service.formulas_by_uuids(db, payload.formula_uuids)
    title = payload.title or DEFAULT_CUSTOM_TITLE
    logger.info(
        "Custom PDF requested: %d uuids, %d found", len(payload.formula_uuids), len(formulas)
    )
    pdf = await run_in_threadpool(pdf_service.generate_collection_pdf, title, formulas)
    return pdf_response(pdf, CUSTOM_FILENAME)
