"""
JWT access-token creation and verification, plus opaque refresh tokens.

Access tokens are compact JWTs (``header.payload.signature``, base64url)
signed with HMAC-SHA256. The signing key and lifetimes come from the
``Settings`` object handed to :class:`TokenIssuer`; nothing here reads
the environment directly.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import secrets
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple, Optional

from config.settings import Settings
from core.exceptions import InvalidAccessTokenError

_HEADER = {"alg": "HS256", "typ": "JWT"}


class IssuedRefreshToken(NamedTuple):
    token: str
    token_hash: str
    expires_at: datetime


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    return urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def hash_refresh_token(token: str) -> str:
    """SHA-256 hex digest used as the stored form of a refresh token."""
    return hashlib.sha256(token.encode()).hexdigest()


class TokenIssuer:
    """Mints access tokens and refresh tokens for a user id."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.jwt_secret.encode()
        self.access_token_ttl = settings.access_token_expiry_minutes * 60
        self.refresh_token_ttl = timedelta(days=settings.refresh_token_expiry_days)

    def _sign(self, signing_input: bytes) -> str:
        return _b64encode(hmac.new(self._secret, signing_input, hashlib.sha256).digest())

    def issue_access_token(self, user_id: int, *, now: Optional[float] = None) -> str:
        """Create a signed token whose ``sub`` claim is ``user_id``."""
        issued_at = int(now if now is not None else time.time())
        payload = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.access_token_ttl,
        }
        header_b64 = _b64encode(json.dumps(_HEADER, separators=(",", ":")).encode())
        payload_b64 = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        signing_input = f"{header_b64}.{payload_b64}".encode()
        return f"{header_b64}.{payload_b64}.{self._sign(signing_input)}"

    def decode_access_token(self, token: str, *, now: Optional[float] = None) -> int:
        """
        Verify token and return the user id from its ``sub`` claim.

        Raises ``InvalidAccessTokenError`` on a malformed token, a bad
        signature, or once ``exp`` is reached (no clock-skew leeway).
        """
        try:
            header_b64, payload_b64, signature = token.split(".")
            header = json.loads(_b64decode(header_b64))
            if header.get("alg") != _HEADER["alg"]:
                raise ValueError("unsupported algorithm")
            expected_sig = self._sign(f"{header_b64}.{payload_b64}".encode())
            if not hmac.compare_digest(signature, expected_sig):
                raise ValueError("bad signature")
            payload: Dict[str, Any] = json.loads(_b64decode(payload_b64))
            current = now if now is not None else time.time()
            if current >= int(payload["exp"]):
                raise ValueError("token expired")
            return int(payload["sub"])
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise InvalidAccessTokenError(f"Invalid or expired token: {exc}") from exc

    def issue_refresh_token(self, *, now: Optional[datetime] = None) -> IssuedRefreshToken:
        """Generate a random opaque refresh token and its expiry."""
        token = secrets.token_urlsafe(48)
        issued_at = now or datetime.now(timezone.utc)
        return IssuedRefreshToken(
            token=token,
            token_hash=hash_refresh_token(token),
            expires_at=issued_at + self.refresh_token_ttl,
        )
