"""Custom exceptions for application-specific error handling."""

from __future__ import annotations

from typing import Optional, Dict, Any


class LecrmException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Render the exception as a failed response envelope."""
        return {
            "success": False,
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class NotFoundError(LecrmException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "not_found", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details, status_code=404)


class BadRequestError(LecrmException):
    """Raised when request is invalid."""

    def __init__(self, message: str = "bad_request", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="BAD_REQUEST", details=details, status_code=400)


# ===== CRM API EXCEPTIONS =====


class CrmApiException(LecrmException):
    """Base exception for errors talking to the CRM data endpoints."""


class CrmApiConnectionError(CrmApiException):
    """Raised when the CRM data endpoints cannot be reached."""

    def __init__(self, message: str = "Failed to reach CRM data endpoints", *, path: Optional[str] = None):
        details = {"path": path} if path else {}
        super().__init__(message, error_code="CRM_API_CONNECTION_ERROR", details=details, status_code=502)


class CrmApiEnvelopeError(CrmApiException):
    """Raised when an endpoint answers with ``success: false``."""

    def __init__(self, message: str, *, path: Optional[str] = None, status_code: Optional[int] = None):
        details: Dict[str, Any] = {}
        if path:
            details["path"] = path
        if status_code:
            details["upstream_status"] = status_code
        super().__init__(message, error_code="CRM_API_ERROR", details=details, status_code=502)


# ===== NOTIFICATION EXCEPTIONS =====


class MutationFailedError(LecrmException):
    """Raised at the HTTP layer when a notification mutation did not apply."""

    def __init__(self, operation: str, message: str = "notification_mutation_failed"):
        super().__init__(
            message,
            error_code="MUTATION_FAILED",
            details={"operation": operation},
            status_code=502,
        )


# ===== AUTHENTICATION EXCEPTIONS =====


class AuthenticationException(LecrmException):
    """Base exception for authentication errors."""


class ExpiredTokenError(AuthenticationException):
    """Raised when token has expired."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, error_code="EXPIRED_TOKEN", status_code=401)
