"""
Formulario Backend — User Service
===================================

What:  Upsert and lookup of user profiles.
Why:   The mobile client signs users in with an external identity provider
       and then calls POST /api/users on every login; the first call creates
       the row and later calls refresh the profile.
Who:   Called by the /api/users route handlers.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from formulario.exceptions import DatabaseError, FormularioError, NotFoundError
from formulario.models.user import User
from formulario.schemas.user import UserResponse, UserUpsertRequest

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "Usuario no encontrado"


class UserService:
    """
    Business logic for users.

    Error Handling Strategy:
        NotFoundError propagates as-is; anything else raised by the session
        is logged and wrapped in DatabaseError.
    """

    async def upsert_user(self, db: AsyncSession, payload: UserUpsertRequest) -> UserResponse:
        """
        Create the user or update name/email/photo_url if the id exists.

        `is_guest` is only written on creation; a guest that later signs in
        keeps the same row and the flag is left alone.
        """
        try:
            result = await db.execute(select(User).where(User.id == payload.id))
            user = result.scalar_one_or_none()

            if user is not None:
                user.name = payload.name
                user.email = payload.email
                user.photo_url = payload.photo_url
                user.updated_at = datetime.now(timezone.utc)
                await db.flush()
                logger.info("User %s updated", user.id)
            else:
                user = User(
                    id=payload.id,
                    name=payload.name,
                    email=payload.email,
                    photo_url=payload.photo_url,
                    is_guest=payload.is_guest,
                )
                db.add(user)
                await db.flush()
                logger.info("User %s created (guest=%s)", user.id, user.is_guest)

            return UserResponse.model_validate(user)

        except FormularioError:
            raise
        except Exception as e:
            logger.error("Database error upserting user %s: %s", payload.id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": payload.id})

    async def get_user(self, db: AsyncSession, user_id: str) -> UserResponse:
        """Fetch a user by id. Raises NotFoundError when missing."""
        try:
            result = await db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
            if user is None:
                raise NotFoundError(USER_NOT_FOUND, resource="user", resource_id=user_id)
            return UserResponse.model_validate(user)
        except FormularioError:
            raise
        except Exception as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

    async def get_user_by_email(self, db: AsyncSession, email: str) -> UserResponse:
        """Fetch a user by email. Raises NotFoundError when missing."""
        try:
            result = await db.execute(select(User).where(User.email == email).limit(1))
            user = result.scalar_one_or_none()
            if user is None:
                raise NotFoundError(USER_NOT_FOUND, resource="user", resource_id=email)
            return UserResponse.model_validate(user)
        except FormularioError:
            raise
        except Exception as e:
            logger.error("Database error fetching user by email: %s", str(e))
            raise DatabaseError(context={"lookup": "email"})


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
