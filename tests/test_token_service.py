"""
Tests for `services/token_service.py`.

Covers contract rules:
- A token verifies to the principal it was issued for until its expiry.
- Expired, tampered or foreign-secret tokens are rejected as authentication errors.
- OAuth state values are bound to one provider and cannot be used as bearer tokens.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
import pytest

from domain.errors import AuthenticationError
from domain.principal import OAuthProvider, Principal, Role
from services.token_service import JWT_ALGORITHM, TokenIssuer

SECRET = "unit-test-secret-with-enough-length-for-hs256"
PRINCIPAL = Principal(
    id=UUID("00000000-0000-0000-0000-000000000020"),
    name="Asha Rao",
    email="asha@example.com",
    role=Role.TELECALLER,
    created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    password_hash="$2b$10$hash",
)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def test_issue_and_verify_round_trip() -> None:
    """Verify a fresh token resolves to the issuing principal's id."""

    issuer = TokenIssuer(SECRET, timedelta(hours=1))

    assert issuer.verify(issuer.issue(PRINCIPAL)) == PRINCIPAL.id


def test_token_claims() -> None:
    """Verify the token carries subject, role and an expiry one lifetime after issue."""

    issuer = TokenIssuer(SECRET, timedelta(hours=1))
    claims = jwt.decode(issuer.issue(PRINCIPAL), SECRET, algorithms=[JWT_ALGORITHM])

    assert claims["sub"] == str(PRINCIPAL.id)
    assert claims["role"] == "telecaller"
    assert claims["exp"] - claims["iat"] == 3600


def test_token_expires() -> None:
    """Verify a token is valid just before expiry and rejected after it."""

    clock = _Clock(datetime.now(timezone.utc))
    issuer = TokenIssuer(SECRET, timedelta(hours=1), clock=clock)
    token = issuer.issue(PRINCIPAL)

    clock.now = clock.now + timedelta(minutes=59)
    assert issuer.verify(token) == PRINCIPAL.id

    clock.now = clock.now + timedelta(minutes=2)
    with pytest.raises(AuthenticationError):
        issuer.verify(token)


def test_tampered_token_rejected() -> None:
    """Verify a payload swapped under an existing signature fails verification."""

    issuer = TokenIssuer(SECRET, timedelta(hours=1))
    header, _, signature = issuer.issue(PRINCIPAL).split(".")
    forged_claims = jwt.encode(
        {"sub": "00000000-0000-0000-0000-000000000099", "role": "admin", "iat": 0, "exp": 2**31},
        "attacker-secret-with-enough-length-for-hs256",
        algorithm=JWT_ALGORITHM,
    ).split(".")[1]
    tampered = f"{header}.{forged_claims}.{signature}"

    with pytest.raises(AuthenticationError):
        issuer.verify(tampered)


def test_foreign_secret_rejected() -> None:
    """Verify a token signed with another secret fails verification."""

    other = TokenIssuer("another-secret-with-enough-length-for-hs256", timedelta(hours=1))

    with pytest.raises(AuthenticationError):
        TokenIssuer(SECRET, timedelta(hours=1)).verify(other.issue(PRINCIPAL))


def test_garbage_and_empty_tokens_rejected() -> None:
    """Verify malformed input is an authentication error, not a crash."""

    issuer = TokenIssuer(SECRET, timedelta(hours=1))

    for token in ("", "not-a-jwt", "a.b.c"):
        with pytest.raises(AuthenticationError):
            issuer.verify(token)


def test_issuer_requires_secret() -> None:
    """Verify an issuer cannot be built without a signing secret."""

    with pytest.raises(ValueError):
        TokenIssuer("", timedelta(hours=1))


def test_oauth_state_bound_to_provider() -> None:
    """Verify state verifies for its provider only."""

    issuer = TokenIssuer(SECRET, timedelta(hours=1))
    state = issuer.issue_oauth_state(OAuthProvider.GITHUB)

    issuer.verify_oauth_state(state, OAuthProvider.GITHUB)

    with pytest.raises(AuthenticationError):
        issuer.verify_oauth_state(state, OAuthProvider.GOOGLE)


def test_oauth_state_missing() -> None:
    """Verify a callback without state is rejected."""

    issuer = TokenIssuer(SECRET, timedelta(hours=1))

    with pytest.raises(AuthenticationError) as excinfo:
        issuer.verify_oauth_state(None, OAuthProvider.GOOGLE)

    assert excinfo.value.message == "Missing OAuth state"


def test_oauth_state_expires() -> None:
    """Verify state is short-lived."""

    clock = _Clock(datetime.now(timezone.utc))
    issuer = TokenIssuer(SECRET, timedelta(days=30), clock=clock)
    state = issuer.issue_oauth_state(OAuthProvider.GOOGLE)

    clock.now = clock.now + timedelta(minutes=11)
    with pytest.raises(AuthenticationError):
        issuer.verify_oauth_state(state, OAuthProvider.GOOGLE)


def test_state_and_bearer_tokens_not_interchangeable() -> None:
    """Verify a state value is not a bearer token and vice versa."""

    issuer = TokenIssuer(SECRET, timedelta(hours=1))

    with pytest.raises(AuthenticationError):
        issuer.verify(issuer.issue_oauth_state(OAuthProvider.GITHUB))

    with pytest.raises(AuthenticationError):
        issuer.verify_oauth_state(issuer.issue(PRINCIPAL), OAuthProvider.GITHUB)


def test_clock_ahead_of_wall_time() -> None:
    """Verify issue and verify agree when the injected clock runs ahead of real time."""

    clock = _Clock(datetime(2030, 1, 1, tzinfo=timezone.utc))
    issuer = TokenIssuer(SECRET, timedelta(hours=1), clock=clock)

    assert issuer.verify(issuer.issue(PRINCIPAL)) == PRINCIPAL.id

    state = issuer.issue_oauth_state(OAuthProvider.GOOGLE)
    issuer.verify_oauth_state(state, OAuthProvider.GOOGLE)


def test_token_issued_in_the_future_rejected() -> None:
    """Verify a token whose iat is after the current clock is not accepted."""

    clock = _Clock(datetime(2030, 1, 1, tzinfo=timezone.utc))
    issuer = TokenIssuer(SECRET, timedelta(hours=1), clock=clock)
    token = issuer.issue(PRINCIPAL)

    clock.now = clock.now - timedelta(minutes=5)
    with pytest.raises(AuthenticationError):
        issuer.verify(token)
