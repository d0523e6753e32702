"""
Formulario Backend — Book SQLAlchemy Model
============================================

What:  ORM model representing the `books` table.
Why:   A book groups formulas for one user; it is the unit of collection export.
How:   Integer surrogate key for the formula foreign key, plus a public UUID
       that every API route uses. Deletion only flips `is_deleted`.

Table Design Rationale:
    - id (int):   Internal join key, never exposed in URLs except the legacy
                  GET /api/formulas/book/{book_id} route
    - uuid:       Public identifier; unique index for lookups
    - is_deleted: Soft delete flag; every read filters on it
    - No cascade: deleting a book leaves its formulas untouched
"""

from datetime import datetime, timezone
from typing import List, TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formulario.database import Base

if TYPE_CHECKING:
    from formulario.models.formula import Formula


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Book(Base):
    """
    A named collection of formulas owned by a user.

    Query Patterns:
        - Books of a user: WHERE user_id = :id AND NOT is_deleted ORDER BY updated_at DESC
          → Uses idx_books_user_id
        - Single book: WHERE uuid = :uuid AND NOT is_deleted
          → Uses the unique index on uuid
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    uuid: Mapped[UUID] = mapped_column(
        Uuid,
        nullable=False,
        unique=True,
        default=uuid4,
        comment="Public identifier used by the API",
    )

    user_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("users.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    image_uri: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    is_deleted: Mapped[bool] = mapped_column(
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

    formulas: Mapped[List["Formula"]] = relationship(back_populates="book", lazy="raise")

    __table_args__ = (
        Index("idx_books_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Book(uuid={self.uuid}, name='{self.name}', is_deleted={self.is_deleted})>"
