"""
Formulario Backend — Formula Schemas
======================================

What:  Request/response models for /api/formulas and /api/pdf/custom.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

DEFAULT_CUSTOM_TITLE = "Colección Personalizada de Fórmulas"


class FormulaCreateRequest(BaseModel):
    """Body of POST /api/formulas."""
    book_id: int = Field(description="Internal id of the owning book")
    user_id: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    formula_text: str = Field(min_length=1, description="Expression, stored and printed verbatim")
    description: Optional[str] = Field(default=None)
    image_uri: Optional[str] = Field(default=None, max_length=1024)


class FormulaUpdateRequest(BaseModel):
    """Body of PUT /api/formulas/{uuid}. Fields are written as sent."""
    name: str = Field(min_length=1, max_length=255)
    formula_text: str = Field(min_length=1)
    description: Optional[str] = Field(default=None)
    image_uri: Optional[str] = Field(default=None, max_length=1024)


class BookRef(BaseModel):
    """The owning book as embedded in formula payloads."""
    name: str
    uuid: UUID


class FormulaResponse(BaseModel):
    """
    Full formula representation.

    `book` is filled by every read route (the join is resolved in the
    service) and is null only on the create response.
    """
    id: int
    uuid: UUID
    book_id: int
    user_id: str
    name: str
    formula_text: str
    description: Optional[str] = None
    image_uri: Optional[str] = None
    is_deleted: bool
    created_at: datetime
    updated_at: datetime
    book: Optional[BookRef] = None


class FormulaSummary(BaseModel):
    """Compact row for GET /api/formulas."""
    uuid: UUID
    name: str
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class FormulaSummaryList(BaseModel):
    formulas: List[FormulaSummary]


class FormulaDeleteResponse(BaseModel):
    message: str = Field(default="Fórmula eliminada correctamente")
    formula: FormulaResponse


class CustomPDFRequest(BaseModel):
    """
    Body of POST /api/pdf/custom.

    An empty `formula_uuids` list is accepted by the schema and rejected by
    the service with a 400, so the client gets the localized message.
    """
    formula_uuids: List[UUID] = Field(default_factory=list, description="Formulas to include")
    title: Optional[str] = Field(default=None, max_length=255, description="Cover title")
