"""
Custom Exception Classes for Route Exposer

This module defines custom exceptions for consistent error responses across
the admin surface and the dispatch proxy. Every exception carries the HTTP
status it maps to; none of them is retried internally.
"""

import enum
from typing import Any

from fastapi import status


class ErrorCode(str, enum.Enum):
    """Machine-readable error codes included in every error response."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_MISSING_FIELD = "VALIDATION_MISSING_FIELD"
    VALIDATION_BAD_REQUEST = "VALIDATION_BAD_REQUEST"
    VALIDATION_DUPLICATE_SLUG = "VALIDATION_DUPLICATE_SLUG"
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ExposerError(Exception):
    """Base exception class for all Route Exposer exceptions"""

    error_code = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(ExposerError):
    """Raised when input validation fails"""

    error_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


class MissingFieldError(ValidationError):
    """Raised when a field required by the route's target kind is absent"""

    error_code = ErrorCode.VALIDATION_MISSING_FIELD

    def __init__(self, field: str, target_kind: str | None = None):
        message = f"Missing required field '{field}'"
        if target_kind:
            message = f"Missing required field '{field}' for target kind '{target_kind}'"
        super().__init__(message=message, field=field, details={"target_kind": target_kind} if target_kind else None)


class BadRequestError(ValidationError):
    """Raised when a proxied request lacks a required parameter"""

    error_code = ErrorCode.VALIDATION_BAD_REQUEST


class DuplicateSlugError(ExposerError):
    """Raised when an active route already uses the slug"""

    error_code = ErrorCode.VALIDATION_DUPLICATE_SLUG

    def __init__(self, slug: str, existing_id: str | None = None):
        details: dict[str, Any] = {"slug": slug}
        if existing_id:
            details["existing_id"] = existing_id
        super().__init__(
            message=f"An active route with slug '{slug}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


# ============================================================================
# Authorization Exceptions
# ============================================================================


class ForbiddenError(ExposerError):
    """Raised when the caller lacks the capability for an action"""

    error_code = ErrorCode.AUTH_PERMISSION_DENIED

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        required_capability: str | None = None,
    ):
        details = {"required_capability": required_capability} if required_capability else {}
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN, details=details)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class NotFoundError(ExposerError):
    """Raised when a proxied target object or option is absent"""

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, message: str = "Resource not found", details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class RouteNotFoundError(NotFoundError):
    """Raised when no materialized route matches the request"""

    error_code = ErrorCode.ROUTE_NOT_FOUND

    def __init__(self, slug: str, method: str):
        super().__init__(
            message="Endpoint not found or not properly configured",
            details={"slug": slug, "method": method},
        )


# ============================================================================
# Dispatch Exceptions
# ============================================================================


class MethodNotAllowedError(ExposerError):
    """Raised when a target kind does not support the request method"""

    error_code = ErrorCode.METHOD_NOT_ALLOWED

    def __init__(self, method: str, allowed: list[str] | None = None):
        details: dict[str, Any] = {"method": method}
        if allowed:
            details["allowed"] = allowed
        super().__init__(
            message="Method not allowed",
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            details=details,
        )


class UpstreamError(ExposerError):
    """Raised when the upstream call fails at the transport level"""

    error_code = ErrorCode.UPSTREAM_ERROR

    def __init__(self, message: str = "Upstream request failed", url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message=message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)
