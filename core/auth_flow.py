"""
AuthService — register, login and refresh-token rotation.

Composes the credential store (``database.helpers``), bcrypt hashing
(``auth.password``) and the :class:`~auth.jwt.TokenIssuer`.  The service
only flushes; the request-scoped session commits.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenIssuer, hash_refresh_token
from auth.models import User
from auth.password import hash_password, verify_password
from config.settings import Settings
from core.exceptions import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
)
from database import helpers
from utils.schemas import TokenPair

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, settings: Settings, token_issuer: TokenIssuer) -> None:
        self.bcrypt_rounds = settings.bcrypt_rounds
        self.tokens = token_issuer

    async def register(self, session: AsyncSession, username: str, password: str) -> User:
        """Create a user; ``DuplicateUsernameError`` if the name is taken."""
        if await helpers.username_exists(session, username):
            raise DuplicateUsernameError()

        user = await helpers.add_user(
            session, username, hash_password(password, rounds=self.bcrypt_rounds)
        )
        logger.info("Registered user %s (%s)", username, user.id)
        return user

    async def login(self, session: AsyncSession, username: str, password: str) -> TokenPair:
        """
        Check credentials and issue an access + refresh token pair.

        Unknown usernames and wrong passwords raise the same
        ``InvalidCredentialsError``.
        """
        user = await helpers.get_user_by_username(session, username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", username)
            raise InvalidCredentialsError()

        pair = await self._issue_pair(session, user.id)
        logger.info("Login: %s (%s)", user.username, user.id)
        return pair

    async def refresh(
        self,
        session: AsyncSession,
        refresh_token: str,
        *,
        now: Optional[datetime] = None,
    ) -> TokenPair:
        """
        Exchange a live refresh token for a new pair, revoking it.

        A token that is unknown, expired or already used is rejected with
        ``InvalidOrExpiredTokenError``; it is never renewed.
        """
        current = now or datetime.now(timezone.utc)
        user_id = await helpers.revoke_refresh_token(
            session, hash_refresh_token(refresh_token), current
        )
        if user_id is None:
            logger.info("Rejected refresh token")
            raise InvalidOrExpiredTokenError()

        pair = await self._issue_pair(session, user_id, now=current)
        logger.info("Rotated refresh token for user %s", user_id)
        return pair

    async def _issue_pair(
        self,
        session: AsyncSession,
        user_id: int,
        *,
        now: Optional[datetime] = None,
    ) -> TokenPair:
        issued = self.tokens.issue_refresh_token(now=now)
        await helpers.add_refresh_token(session, user_id, issued.token_hash, issued.expires_at)
        return TokenPair(
            access_token=self.tokens.issue_access_token(user_id),
            refresh_token=issued.token,
        )
