from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Error de dominio con código HTTP asociado.
    El handler global (core/handlers.py) es el único que lo convierte en respuesta.
    """
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity: str = "Resource", details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{entity} not found", details)
        self.entity = entity


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
