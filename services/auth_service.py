"""
Local authentication: registration, login, and bearer-token principal lookup.

Both local and federated success funnel into `issue_token`, so token semantics
are identical regardless of the entry path.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from domain.errors import AuthenticationError, ConflictError, ValidationError
from domain.principal import Principal, Role, parse_role
from domain.time import utc_now
from repositories.user_repository import get_user_by_email, get_user_by_id, insert_user
from services.password_hasher import hash_password, verify_password
from services.token_service import get_token_issuer

logger = logging.getLogger(__name__)

# One message for unknown email and wrong password alike.
INVALID_CREDENTIALS = "Invalid credentials"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register(name: str, email: str, password: str, role: Optional[str] = None) -> Principal:
    """
    Create a local principal.

    The password is hashed here, before the record exists, so a plaintext
    secret never reaches the store.

    Raises:
        ValidationError: Missing field or unknown role
        ConflictError: Email already registered
    """
    if not name or not name.strip():
        raise ValidationError("Please add a name")
    if not email or not email.strip():
        raise ValidationError("Please add an email")
    if not password:
        raise ValidationError("Please add a password")
    parsed_role: Role = parse_role(role)
    email = normalize_email(email)

    if get_user_by_email(email) is not None:
        raise ConflictError("Email already registered")

    principal = Principal(
        id=uuid.uuid4(),
        name=name.strip(),
        email=email,
        role=parsed_role,
        created_at=utc_now(),
        password_hash=hash_password(password),
    )
    # The unique constraint on users.email is authoritative; the pre-check
    # above only gives a fast, friendly path.
    insert_user(principal)
    logger.info("New principal registered: %s (%s)", principal.email, principal.role.value)
    return principal


def login(email: str, password: str) -> Principal:
    """
    Authenticate with email and password.

    Raises:
        ValidationError: Either field empty
        AuthenticationError: Unknown email, wrong password, or a federated-only
            principal (all with the same message)
    """
    if not email or not password:
        raise ValidationError("Please provide an email and password")

    principal = get_user_by_email(normalize_email(email))
    if principal is None or not verify_password(password, principal.password_hash):
        logger.warning("Failed login attempt")
        raise AuthenticationError(INVALID_CREDENTIALS)

    logger.info("Principal logged in: %s", principal.id)
    return principal


def issue_token(principal: Principal) -> str:
    return get_token_issuer().issue(principal)


def authenticate_token(token: Optional[str]) -> Principal:
    """
    Resolve a bearer token to a live principal.

    Raises:
        AuthenticationError: Missing/invalid/expired token, or the principal no
            longer exists
    """
    if not token:
        raise AuthenticationError("Not authorized to access this route")
    principal_id = get_token_issuer().verify(token)
    principal = get_user_by_id(principal_id)
    if principal is None:
        raise AuthenticationError("Invalid or expired token")
    return principal


__all__ = [
    "INVALID_CREDENTIALS",
    "authenticate_token",
    "issue_token",
    "login",
    "normalize_email",
    "register",
]
