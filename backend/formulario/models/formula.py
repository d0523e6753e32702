"""
Formulario Backend — Formula SQLAlchemy Model
===============================================

What:  ORM model representing the `formulas` table.
Why:   The core record: a named expression (`formula_text`) with optional prose.
How:   Belongs to one book through the integer `book_id` foreign key and to
       one user. Deletion only flips `is_deleted`.

`formula_text` is stored verbatim; the renderer prints it as-is.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formulario.database import Base

if TYPE_CHECKING:
    from formulario.models.book import Book


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Formula(Base):
    """
    A named formula inside a book.

    Query Patterns:
        - Formulas of a book for export: WHERE book_id = :id AND NOT is_deleted
          ORDER BY created_at ASC → idx_formulas_book_id
        - Formulas of a user: WHERE user_id = :id AND NOT is_deleted
          ORDER BY updated_at DESC → idx_formulas_user_id
    """

    __tablename__ = "formulas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    uuid: Mapped[UUID] = mapped_column(
        Uuid,
        nullable=False,
        unique=True,
        default=uuid4,
        comment="Public identifier used by the API",
    )

    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id"),
        nullable=False,
    )

    user_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("users.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    formula_text: Mapped[str] = mapped_column(Text, nullable=False)

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

    # lazy="raise": async sessions cannot lazy-load; queries must joinedload()
    book: Mapped["Book"] = relationship(back_populates="formulas", lazy="raise")

    __table_args__ = (
        Index("idx_formulas_book_id", "book_id"),
        Index("idx_formulas_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Formula(uuid={self.uuid}, name='{self.name}', is_deleted={self.is_deleted})>"
