"""
Formulario Backend — User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table.
Why:   Owner of books and formulas; the id is supplied by the client's
       identity provider, so it is a string rather than a generated key.
Who:   Used by UserService for the upsert/lookup operations.

Users are never deleted, so the table has no `is_deleted` flag.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from formulario.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A person (or guest session) that owns books and formulas."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="Client-supplied identifier from the identity provider",
    )

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)

    photo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Guests keep their data but have no email on file
    is_guest: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', email='{self.email}', is_guest={self.is_guest})>"
