"""
Password and token-secret hashing utilities.

Responsibilities:
- Hash user passwords with Argon2id
- Verify passwords without raising on mismatch or malformed hashes
- Digest refresh tokens so the raw token is never stored
"""
from __future__ import annotations

import hashlib
import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from argon2.low_level import Type

_argon2 = PasswordHasher(time_cost=2, memory_cost=102400, parallelism=8, hash_len=32, type=Type.ID)


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    if not password:
        raise ValueError("password must not be empty")
    return _argon2.hash(password)


def verify_password(password: str, encoded_hash: str) -> bool:
    if not password or not encoded_hash:
        return False
    try:
        return _argon2.verify(encoded_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(encoded_hash: str) -> bool:
    return _argon2.check_needs_rehash(encoded_hash)


def digest_token(token: str) -> str:
    """Return a hex SHA-256 digest of a token for storage and lookup."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_matches(token: str, stored_digest: str | None) -> bool:
    if not token or not stored_digest:
        return False
    return hmac.compare_digest(digest_token(token), stored_digest)
