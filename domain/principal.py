"""
Domain: Principal (user) accounts.

A Principal is an authenticated identity, either an admin or a telecaller.

Contract excerpts implemented here:
- email is unique across all principals and is the only join key between local
  and federated identities.
- Exactly one authentication path is valid per principal: a local password hash
  or an OAuth provider, never both and never neither.
- role and oauth_provider are closed sets, checked at every construction site.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from .errors import ValidationError
from .time import require_utc_timestamp


class Role(str, Enum):
    ADMIN = "admin"
    TELECALLER = "telecaller"


class OAuthProvider(str, Enum):
    GOOGLE = "google"
    GITHUB = "github"


def parse_role(value: Any) -> Role:
    """Coerce a raw role value into a Role, defaulting to telecaller."""
    if value is None or value == "":
        return Role.TELECALLER
    try:
        return Role(value)
    except ValueError:
        allowed = ", ".join(r.value for r in Role)
        raise ValidationError(f"Invalid role '{value}'. Allowed: {allowed}") from None


def parse_oauth_provider(value: Any) -> OAuthProvider:
    try:
        return OAuthProvider(value)
    except ValueError:
        raise ValidationError(f"Unsupported OAuth provider '{value}'") from None


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Immutable principal record.

    Principals are never edited after creation in this service, so the entity is
    frozen. password_hash is present iff oauth_provider is absent.
    """

    id: UUID
    name: str
    email: str
    role: Role
    created_at: datetime
    password_hash: Optional[str] = None
    oauth_provider: Optional[OAuthProvider] = None
    oauth_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.role, Role):
            raise ValidationError(f"role must be a Role, got {self.role!r}")
        if self.oauth_provider is not None and not isinstance(self.oauth_provider, OAuthProvider):
            raise ValidationError(f"oauth_provider must be an OAuthProvider, got {self.oauth_provider!r}")
        if not self.name or not self.name.strip():
            raise ValidationError("name is required")
        if not self.email or not self.email.strip():
            raise ValidationError("email is required")
        if (self.password_hash is None) == (self.oauth_provider is None):
            raise ValidationError(
                "principal must have exactly one of password_hash or oauth_provider"
            )
        require_utc_timestamp("created_at", self.created_at)

    @property
    def is_federated(self) -> bool:
        return self.oauth_provider is not None

    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def public_view(self) -> dict[str, Any]:
        """The subset handed to clients after authentication."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
        }


__all__ = [
    "Role",
    "OAuthProvider",
    "Principal",
    "parse_role",
    "parse_oauth_provider",
]
