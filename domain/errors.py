"""
Domain: error taxonomy.

Every failure the service reports to a caller is one of these. Each carries the
HTTP status the API layer renders it with, so routers never translate by hand.
"""

from __future__ import annotations


class LeadDeskError(Exception):
    """Base class for all expected failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LeadDeskError):
    """Malformed or missing input."""

    status_code = 400


class AuthenticationError(LeadDeskError):
    """Bad credentials, bad/expired token, or an unresolvable principal."""

    status_code = 401


class AuthorizationError(LeadDeskError):
    """Role or ownership mismatch."""

    status_code = 403


class NotFoundError(LeadDeskError):
    status_code = 404


class ConflictError(LeadDeskError):
    """Uniqueness violation (duplicate email)."""

    status_code = 409


class OAuthProviderError(LeadDeskError):
    """Upstream identity provider failure."""

    status_code = 502


class StoreError(LeadDeskError):
    """The record store rejected or failed an operation."""

    status_code = 500


__all__ = [
    "LeadDeskError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "OAuthProviderError",
    "StoreError",
]
