"""
API Dependencies.

Credential extraction, principal resolution and role gates shared by routers.
"""

from __future__ import annotations

from typing import Callable, Optional

import httpx
from fastapi import Depends, Request

from domain.principal import Principal, Role
from services.auth_service import authenticate_token
from services.authorization import require_role

TOKEN_COOKIE = "token"


def extract_token(request: Request) -> Optional[str]:
    """
    Bearer token from the Authorization header, else from the token cookie.

    Both transports carry the same credential and verify identically.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header:
        scheme, _, value = auth_header.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
    return request.cookies.get(TOKEN_COOKIE) or None


def get_current_principal(request: Request) -> Principal:
    """Raises AuthenticationError when no valid credential is presented."""
    return authenticate_token(extract_token(request))


def require_roles(*roles: Role) -> Callable[..., Principal]:
    """Dependency factory: the current principal, if its role is one of `roles`."""

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        require_role(principal, roles)
        return principal

    return dependency


def get_oauth_http_client() -> Optional[httpx.Client]:
    """HTTP client for provider calls. None means one short-lived client per call."""
    return None
