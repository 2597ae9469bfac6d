"""
Federated identity resolution.

Maps an external provider profile to a Principal, provisioning one the first
time an email is seen. Email is the only join key: an existing principal with
the same email is reused untouched, even if it was created locally or through
the other provider (first writer wins; there is no account linking).

Lookup-or-create is made atomic per email by the store's unique constraint on
users.email. When two first-time logins race, the loser's insert fails with
ConflictError and it re-reads the winner's record.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from domain.errors import ConflictError, OAuthProviderError, StoreError
from domain.principal import Principal, Role
from domain.time import utc_now
from repositories.user_repository import get_user_by_email, insert_user
from services.auth_service import normalize_email
from services.oauth_providers import FederatedProfile, OAuthProviderClient

logger = logging.getLogger(__name__)

NO_EMAIL_AVAILABLE = "No email available"


class NoEmailAvailableError(OAuthProviderError):
    """Neither the profile nor the provider's email endpoint yielded an email."""

    def __init__(self) -> None:
        super().__init__(NO_EMAIL_AVAILABLE)


def resolve_email(
    profile: FederatedProfile,
    provider: OAuthProviderClient,
    access_token: Optional[str],
) -> str:
    """
    The profile's email, else the provider's primary email.

    Raises:
        NoEmailAvailableError: Neither source yields an email
    """
    email = profile.email
    if not email and access_token:
        email = provider.fetch_primary_email(access_token)
    if not email:
        raise NoEmailAvailableError()
    return normalize_email(email)


def resolve(
    provider: OAuthProviderClient,
    profile: FederatedProfile,
    access_token: Optional[str] = None,
) -> Principal:
    """
    Resolve (or provision) the principal for a federated login.

    Args:
        provider: Capability set of the provider the profile came from
        profile: Profile returned by the provider
        access_token: Token used for the email fallback, if needed

    Returns:
        The existing or newly created Principal
    """
    email = resolve_email(profile, provider, access_token)

    existing = get_user_by_email(email)
    if existing is not None:
        logger.info("Federated login reused principal %s via %s", existing.id, profile.provider.value)
        return existing

    principal = Principal(
        id=uuid.uuid4(),
        name=profile.display_name or profile.username or email,
        email=email,
        role=Role.TELECALLER,
        created_at=utc_now(),
        oauth_provider=profile.provider,
        oauth_id=profile.subject,
    )
    try:
        insert_user(principal)
    except ConflictError:
        # A concurrent login for the same email inserted first.
        winner = get_user_by_email(email)
        if winner is None:
            raise StoreError("Principal vanished after a conflicting insert") from None
        logger.info("Federated login lost provisioning race; reusing principal %s", winner.id)
        return winner

    logger.info("Provisioned federated principal %s via %s", principal.id, profile.provider.value)
    return principal


__all__ = ["NO_EMAIL_AVAILABLE", "NoEmailAvailableError", "resolve", "resolve_email"]
