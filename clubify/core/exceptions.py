"""
Application exceptions rendered by the centralized error handlers
"""

from typing import Optional, Dict, Any


class BaseAppException(Exception):
    """Base application exception"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


# === Authentication / authorization ===
class AuthenticationError(BaseAppException):
    """No valid caller identity"""

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, 401, "Unauthorized", details)


class AuthorizationError(BaseAppException):
    """Caller is authenticated but not allowed"""

    def __init__(
        self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, 403, "Forbidden", details)


# === Validation ===
class ValidationError(BaseAppException):
    """Malformed input, detected before any write"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, "VALIDATION_ERROR", details)


# === Resources ===
class NotFoundError(BaseAppException):
    """Resource not found"""

    def __init__(self, resource: str, identifier: str = None):
        if identifier:
            message = f"{resource} with identifier '{identifier}' not found"
            details = {"resource": resource, "identifier": identifier}
        else:
            message = f"{resource} not found"
            details = {"resource": resource}
        super().__init__(message, 404, "NOT_FOUND", details)


# === Store failures ===
class DatabaseError(BaseAppException):
    """Store call failed"""

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, 500, "DATABASE_ERROR", details)


class DatabaseConnectionError(DatabaseError):
    """Store is unreachable"""

    def __init__(self, message: str = "Database connection failed"):
        super().__init__(message)
        self.error_code = "DATABASE_CONNECTION_ERROR"


class DatabaseTimeoutError(DatabaseError):
    """Store call timed out"""

    def __init__(self, operation: str, timeout: int):
        message = f"Database operation '{operation}' timed out after {timeout}s"
        super().__init__(message, {"operation": operation, "timeout": timeout})
        self.error_code = "DATABASE_TIMEOUT"


# === Configuration ===
class ConfigurationError(BaseAppException):
    """Invalid or missing configuration"""

    def __init__(self, parameter: str, message: str = None):
        message = (
            message or f"Configuration parameter '{parameter}' is invalid or missing"
        )
        details = {"parameter": parameter}
        super().__init__(message, 500, "CONFIGURATION_ERROR", details)
