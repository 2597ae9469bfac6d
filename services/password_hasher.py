"""
One-way password hashing for local credentials (bcrypt).

bcrypt only reads the first 72 bytes of a secret. Longer passwords are
truncated to that prefix before hashing and before verification, so both sides
always agree on what was hashed.
"""

from __future__ import annotations

from typing import Optional

import bcrypt

# Cost factor existing account hashes were created with.
BCRYPT_ROUNDS = 10

BCRYPT_MAX_BYTES = 72


def _secret_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_secret_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """False for principals without a hash (federated-only) or a corrupt hash."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_secret_bytes(password), hashed.encode("utf-8"))
    except ValueError:
        return False


__all__ = ["BCRYPT_MAX_BYTES", "hash_password", "verify_password"]
