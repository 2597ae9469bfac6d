"""
Process-wide configuration.

Values come from the environment, with a .env file at the project root loaded
first (same convention as the Supabase client). Settings are immutable and cached
for the life of the process; tests call `get_settings.cache_clear()` after
changing the environment.

Environment variables:
- JWT_SECRET (required): token signing secret
- JWT_EXPIRE: token lifetime, seconds or "<n>s|m|h|d" (default 30d)
- JWT_COOKIE_EXPIRE: cookie lifetime in days (default 30)
- CLIENT_URL: frontend origin for OAuth redirects and CORS
- BACKEND_URL: public origin of this API, used for default OAuth callback URLs
- GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET / GOOGLE_CALLBACK_URL
- GITHUB_CLIENT_ID / GITHUB_CLIENT_SECRET / GITHUB_CALLBACK_URL
- ENVIRONMENT: "production" marks cookies Secure
- LOG_LEVEL (default INFO)
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from domain.principal import OAuthProvider

env_path = Path(__file__).parent.parent / ".env"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> timedelta:
    """
    Parse a lifetime such as "3600", "15m", "12h" or "30d".

    Raises:
        RuntimeError: If the value is not a positive duration
    """
    match = _DURATION_RE.match(value)
    if not match or int(match.group(1)) <= 0:
        raise RuntimeError(
            f"Invalid duration: {value!r}. Use seconds or <n>s, <n>m, <n>h, <n>d."
        )
    return timedelta(seconds=int(match.group(1)) * _DURATION_UNITS[match.group(2)])


@dataclass(frozen=True, slots=True)
class OAuthClientConfig:
    """Credentials registered with one external identity provider."""

    client_id: Optional[str]
    client_secret: Optional[str]
    callback_url: str

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass(frozen=True, slots=True)
class Settings:
    jwt_secret: str
    token_lifetime: timedelta
    cookie_lifetime: timedelta
    client_url: str
    oauth_clients: Mapping[OAuthProvider, OAuthClientConfig]
    production: bool = False
    log_level: str = "INFO"

    def oauth_client(self, provider: OAuthProvider) -> OAuthClientConfig:
        return self.oauth_clients[provider]


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(
            f"Missing environment variable: {name}. "
            f"Set {name} in the environment or in {env_path}."
        )
    return value


def _oauth_client(provider: OAuthProvider, backend_url: str) -> OAuthClientConfig:
    prefix = provider.value.upper()
    return OAuthClientConfig(
        client_id=os.getenv(f"{prefix}_CLIENT_ID"),
        client_secret=os.getenv(f"{prefix}_CLIENT_SECRET"),
        callback_url=os.getenv(
            f"{prefix}_CALLBACK_URL",
            f"{backend_url}/auth/{provider.value}/callback",
        ),
    )


def load_settings() -> Settings:
    """Build Settings from the environment (and .env)."""
    load_dotenv(dotenv_path=env_path)

    backend_url = os.getenv("BACKEND_URL", "http://localhost:5000").rstrip("/")
    cookie_days = os.getenv("JWT_COOKIE_EXPIRE", "30")
    try:
        cookie_lifetime = timedelta(days=int(cookie_days))
    except ValueError:
        raise RuntimeError(f"Invalid JWT_COOKIE_EXPIRE: {cookie_days!r} (days)") from None

    return Settings(
        jwt_secret=_require("JWT_SECRET"),
        token_lifetime=parse_duration(os.getenv("JWT_EXPIRE", "30d")),
        cookie_lifetime=cookie_lifetime,
        client_url=os.getenv("CLIENT_URL", "http://localhost:3000").rstrip("/"),
        oauth_clients={
            provider: _oauth_client(provider, backend_url) for provider in OAuthProvider
        },
        production=os.getenv("ENVIRONMENT", "development").lower() == "production",
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


__all__ = [
    "Settings",
    "OAuthClientConfig",
    "get_settings",
    "load_settings",
    "parse_duration",
]
