"""
Formulario Backend — Application Package Initializer
=====================================================

What: Marks the `formulario` directory as a Python package.
Why:  Enables module imports like `from formulario.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows the same layered shape throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Records + PDF output)   │  ← Queries, soft delete, rendering
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP to service calls, services own every query and
    the document layout, and nothing below the routes knows about HTTP.
"""

__version__ = "1.0.0"
