"""
Custom Application Exceptions.

Provides a hierarchy of exceptions for consistent error handling.

Usage:
    from utils.exceptions import InvalidSelectionError, LookupLoadFailure

    # In routes
    raise InvalidSelectionError("district", "Kathmandu")

    # In the lookup loader
    raise LookupLoadFailure("map-province-districts.json", "HTTP 404")
"""
from typing import Optional, Dict, Any


class AppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "INVALID_SELECTION")
        status_code: HTTP status code to return
        details: Additional context for debugging
    """
    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "status": "error",
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# =============================================================================
# VALIDATION EXCEPTIONS (422 errors)
# =============================================================================

class ValidationError(AppError):
    """
    Input validation failed.

    Use for: Unknown address level, malformed request values.
    """
    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        _details = details or {}
        if field:
            _details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", status_code=422, details=_details)


class InvalidSelectionError(ValidationError):
    """
    A cascade value is not one of the options available under its parent.
    """
    def __init__(
        self,
        level: str,
        value: str,
        details: Optional[Dict[str, Any]] = None
    ):
        _details = details or {}
        _details["value"] = value
        super().__init__(
            f"'{value}' is not an available {level} option",
            field=level,
            details=_details
        )
        self.code = "INVALID_SELECTION"


# =============================================================================
# INFRASTRUCTURE EXCEPTIONS (500-level errors)
# =============================================================================

class LookupLoadFailure(AppError):
    """
    One of the geographic lookup documents could not be loaded.

    Covers: fetch errors, non-2xx responses, invalid JSON, wrong document shape.
    Caught and logged at the lookup cache / selector boundary.
    """
    def __init__(
        self,
        resource: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        _details = details or {}
        _details["resource"] = resource
        if reason:
            _details["reason"] = reason
        super().__init__(
            f"Failed to load address lookup: {resource}",
            "LOOKUP_LOAD_FAILURE",
            status_code=503,
            details=_details
        )


class LookupUnavailableError(AppError):
    """
    The address lookup is not loaded, so the selector is disabled.
    """
    def __init__(
        self,
        message: str = "Address lookup is not available",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message,
            "ADDRESS_LOOKUP_UNAVAILABLE",
            status_code=503,
            details=details
        )
