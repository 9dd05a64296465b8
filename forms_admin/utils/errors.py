"""Typed application errors mapped to HTTP responses in ``forms_admin.main``"""
from typing import Dict, List, Optional


class AppError(Exception):
    """Base class for errors the API boundary translates into a JSON envelope"""

    status_code = 500

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401

    def __init__(self, message: str = "Authentication required", errors=None):
        super().__init__(message, errors)


class AuthorizationError(AppError):
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions", errors=None):
        super().__init__(message, errors)


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, message: str = "Resource not found", errors=None):
        super().__init__(message, errors)


class ConflictError(AppError):
    status_code = 409

    def __init__(self, message: str = "Resource conflict", errors=None):
        super().__init__(message, errors)


class RateLimitError(AppError):
    status_code = 429

    def __init__(self, message: str = "Too many requests", errors=None):
        super().__init__(message, errors)
