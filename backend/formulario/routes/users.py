"""
Formulario Backend — User Route Handlers
==========================================

What:  POST /api/users (upsert), GET /api/users/{id}, GET /api/users/email/{email}.
Who:   Called by the mobile client right after sign-in.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from formulario.database import get_db_session
from formulario.schemas.common import ErrorResponse
from formulario.schemas.user import UserResponse, UserUpsertRequest
from formulario.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Create or update a user",
)
async def upsert_user(
    payload: UserUpsertRequest,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """
    Creates the user on first sign-in, refreshes the profile afterwards.

    Always answers 201 with the stored row, whether it was inserted or updated.
    """
    return await user_service.upsert_user(db, payload)


@router.get(
    "/email/{email}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user by email",
)
async def get_user_by_email(
    email: str,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_user_by_email(db, email)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user by id",
)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_user(db, user_id)
