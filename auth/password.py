"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting. The work factor comes from configuration
(`Settings.bcrypt_rounds`) and is passed in by the caller.
"""

from __future__ import annotations

import bcrypt

# bcrypt only consumes the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int) -> str:
    """Hash a password with bcrypt (auto-salted) at cost ``rounds``."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash. Never raises."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except (ValueError, TypeError, AttributeError):
        return False
