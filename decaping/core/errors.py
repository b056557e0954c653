"""Error taxonomy shared by the store, the services and the API layer.

Every error carries a stable machine-readable ``category`` and the HTTP
status it maps to. The exception handlers registered in ``main.py`` render
them as ``{"category", "detail", "request_id"}`` (plus ``errors`` for
validation failures).
"""

from typing import Dict, List, Optional


class AppError(Exception):
    category = "internal_error"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class AuthenticationError(AppError):
    category = "authentication_error"
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(AppError):
    category = "authorization_error"
    status_code = 403

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class ValidationError(AppError):
    category = "validation_error"
    status_code = 422

    def __init__(self, message: str = "Invalid request data", fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {}

    def field_errors(self) -> List[Dict[str, str]]:
        return [{"field": name, "message": msg} for name, msg in self.fields.items()]


class NotFoundError(AppError):
    category = "not_found"
    status_code = 404

    def __init__(self, entity: str = "Resource"):
        super().__init__(f"{entity} not found")
        self.entity = entity


class InvariantViolation(AppError):
    category = "invariant_violation"
    status_code = 409


class ConflictError(AppError):
    category = "conflict"
    status_code = 409
