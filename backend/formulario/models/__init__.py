"""
Formulario Backend — ORM Models
================================

Importing this package registers every table with `Base.metadata`, which
Alembic and the test suite rely on.
"""

from formulario.models.user import User
from formulario.models.book import Book
from formulario.models.formula import Formula

__all__ = ["User", "Book", "Formula"]
