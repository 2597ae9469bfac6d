"""
Authorization guard: role and ownership checks against a verified principal.

Admins read any lead but never get an ownership bypass on writes; every mutating
lead operation requires literal ownership regardless of role.
"""

from __future__ import annotations

import logging
from typing import Iterable

from domain.errors import AuthorizationError
from domain.lead import Lead
from domain.principal import Principal, Role

logger = logging.getLogger(__name__)


def require_role(principal: Principal, allowed_roles: Iterable[Role]) -> None:
    allowed = frozenset(allowed_roles)
    if principal.role not in allowed:
        logger.warning("Role %s denied (allowed: %s)", principal.role.value, sorted(r.value for r in allowed))
        raise AuthorizationError(
            f"User role {principal.role.value} is not authorized to access this route"
        )


def require_ownership(principal: Principal, lead: Lead) -> None:
    if not lead.is_owned_by(principal.id):
        logger.warning("Principal %s denied write on lead %s", principal.id, lead.id)
        raise AuthorizationError(f"User {principal.id} is not authorized to modify this lead")


def require_read_access(principal: Principal, lead: Lead) -> None:
    """Owner or any admin."""
    if principal.role is Role.ADMIN or lead.is_owned_by(principal.id):
        return
    logger.warning("Principal %s denied read on lead %s", principal.id, lead.id)
    raise AuthorizationError(f"User {principal.id} is not authorized to access this lead")


__all__ = ["require_role", "require_ownership", "require_read_access"]
