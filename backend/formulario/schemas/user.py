"""
Formulario Backend — User Schemas
===================================

What:  Request/response models for /api/users.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserUpsertRequest(BaseModel):
    """
    Body of POST /api/users.

    The same payload creates a user the first time and refreshes the
    profile fields afterwards; `is_guest` is only honored on creation.
    """
    id: str = Field(min_length=1, max_length=128, description="Identity provider user id")
    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=320)
    photo_url: Optional[str] = Field(default=None, max_length=1024)
    is_guest: bool = Field(default=False)


class UserResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    photo_url: Optional[str] = None
    is_guest: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
