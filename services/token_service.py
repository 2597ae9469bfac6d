"""
Stateless bearer credentials (JWT, HS256).

Tokens carry the principal id (`sub`) and role, plus `iat`/`exp`. Nothing is
stored server-side: verification is signature + expiry only, and there is no
revocation list, so logout is client-side discard.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Callable, Optional
from uuid import UUID

import jwt

from domain.errors import AuthenticationError
from domain.principal import OAuthProvider, Principal
from services.settings import get_settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
OAUTH_STATE_LIFETIME = timedelta(minutes=10)

_INVALID_TOKEN = "Invalid or expired token"


class TokenIssuer:
    """
    Mints and verifies bearer tokens.

    Args:
        secret: HMAC signing secret
        lifetime: How long an issued token stays valid
        clock: Returns the current UTC time (injectable for tests)
    """

    def __init__(
        self,
        secret: str,
        lifetime: timedelta,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if not secret:
            raise ValueError("secret is required")
        self._secret = secret
        self.lifetime = lifetime
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, principal: Principal) -> str:
        now = self._clock()
        payload = {
            "sub": str(principal.id),
            "role": principal.role.value,
            "iat": now,
            "exp": now + self.lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> UUID:
        """
        Verify a token and return the subject principal id.

        Raises:
            AuthenticationError: Bad signature, malformed token, missing claims,
                or expiry in the past
        """
        payload = self._decode(token)
        try:
            return UUID(str(payload["sub"]))
        except (KeyError, ValueError):
            raise AuthenticationError(_INVALID_TOKEN) from None

    def issue_oauth_state(self, provider: OAuthProvider) -> str:
        """Short-lived signed `state` value binding an OAuth round-trip to a provider."""
        now = self._clock()
        payload = {
            "aud": f"oauth-state:{provider.value}",
            "iat": now,
            "exp": now + OAUTH_STATE_LIFETIME,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify_oauth_state(self, state: Optional[str], provider: OAuthProvider) -> None:
        if not state:
            raise AuthenticationError("Missing OAuth state")
        self._decode(state, audience=f"oauth-state:{provider.value}")

    def _decode(self, token: str, audience: Optional[str] = None) -> dict[str, Any]:
        if not token:
            raise AuthenticationError(_INVALID_TOKEN)
        now = self._clock()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                audience=audience,
                options={"require": ["exp", "iat"], "verify_exp": False, "verify_iat": False},
            )
            issued_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
            expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        except (jwt.InvalidTokenError, TypeError, ValueError, OverflowError, OSError):
            raise AuthenticationError(_INVALID_TOKEN) from None

        # Both time claims are checked against the injected clock, not the wall clock.
        if issued_at > now or expires_at <= now:
            raise AuthenticationError(_INVALID_TOKEN)
        return payload


@lru_cache(maxsize=1)
def get_token_issuer() -> TokenIssuer:
    settings = get_settings()
    return TokenIssuer(settings.jwt_secret, settings.token_lifetime)


__all__ = ["TokenIssuer", "get_token_issuer", "JWT_ALGORITHM"]
