"""
Formulario Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-facing messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    FormularioError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    ├── DocumentGenerationError  → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

Design Decision:
    The PDF renderer raises DocumentGenerationError instead of returning a
    success/failure value. The exception carries the underlying cause and
    propagates to the same handler chain as every other failure, so a
    caller either holds the complete bytes or an exception, never both.
"""

from typing import Any, Dict, Optional


class FormularioError(Exception):
    """
    Base exception for all Formulario application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "Ocurrió un error inesperado",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(FormularioError):
    """
    Raised when client input fails a business rule.

    When:    Empty formula selection for a custom PDF, empty collection handed
             to the renderer.
    HTTP:    400 Bad Request

    Schema-level problems (wrong types, malformed UUIDs) are rejected by
    FastAPI itself with 422 before reaching any service.
    """

    def __init__(
        self,
        message: str = "Datos de entrada no válidos",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(FormularioError):
    """
    Raised when a requested record does not exist (or is soft-deleted).

    HTTP:    404 Not Found

    The message is the localized text shown to API consumers, e.g.
    "Fórmula no encontrada". Services pick it; the handler returns it as-is.
    """

    def __init__(
        self,
        message: str = "Recurso no encontrado",
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class DocumentGenerationError(FormularioError):
    """
    Raised when drawing or finalizing a PDF document fails.

    What:    Any exception raised while the canvas is being laid out.
    HTTP:    500 Internal Server Error

    The whole document is discarded; `cause` keeps the original exception
    for logging and the message includes its text.
    """

    def __init__(
        self,
        message: str = "Error generando el PDF",
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if cause is not None:
            ctx["cause"] = type(cause).__name__
            message = f"{message}: {cause}"
        super().__init__(message=message, context=ctx)
        self.cause = cause


class DatabaseError(FormularioError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info (SQL, constraint names) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "Error de base de datos. Inténtalo de nuevo más tarde.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
