"""
Formulario Backend — Book Schemas
===================================

What:  Request/response models for /api/books.
"""

from uuid import UUID
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BookCreateRequest(BaseModel):
    """Body of POST /api/books."""
    user_id: str = Field(min_length=1, max_length=128, description="Owner user id")
    name: str = Field(min_length=1, max_length=255, description="Display name of the book")
    description: Optional[str] = Field(default=None)
    image_uri: Optional[str] = Field(default=None, max_length=1024)


class BookUpdateRequest(BaseModel):
    """
    Body of PUT /api/books/{uuid}.

    All three fields are written as sent, so omitting `description`
    clears it, the same way the mobile client has always behaved.
    """
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None)
    image_uri: Optional[str] = Field(default=None, max_length=1024)


class BookResponse(BaseModel):
    id: int = Field(description="Internal id (used by GET /api/formulas/book/{book_id})")
    uuid: UUID = Field(description="Public identifier")
    user_id: str
    name: str
    description: Optional[str] = None
    image_uri: Optional[str] = None
    is_deleted: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookDeleteResponse(BaseModel):
    message: str = Field(default="Libro eliminado correctamente")
    book: BookResponse
