"""
Shared error handling for the repository access services.
"""

from typing import Dict, Any, Optional


class GrantServiceError(Exception):
    """Base exception for the grant services.

    Every subclass carries the HTTP status it maps to, so callers at the
    request boundary can translate it without inspecting the type.
    """

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class BadRequest(GrantServiceError):
    """Malformed client input. Never retried, no state change."""

    status_code = 400

    def __init__(self, message: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__("BAD_REQUEST", message, details)


class Forbidden(GrantServiceError):
    """Entitlement or policy rejection. Never retried, no state change."""

    status_code = 403

    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__("FORBIDDEN", message, details)


class UpstreamError(GrantServiceError):
    """A dependency was unreachable or returned unparseable data."""

    status_code = 500

    def __init__(self, service: str, message: str = "External service error",
                 details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("UPSTREAM_ERROR", message, details)


class StorageError(GrantServiceError):
    """Persisted grant state was unreachable or corrupt."""

    status_code = 500

    def __init__(self, message: str = "Grant storage unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORAGE_ERROR", message, details)
