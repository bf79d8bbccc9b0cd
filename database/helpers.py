"""
Database helper functions — credential store for users and refresh tokens.

"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateUsernameError
from database.models import RefreshToken, User

logger = logging.getLogger(__name__)


async def username_exists(session: AsyncSession, username: str) -> bool:
    """Exact, case-sensitive match on ``username``."""
    result = await session.execute(select(exists().where(User.username == username)))
    return bool(result.scalar())


async def get_user_by_username(session: AsyncSession, username: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def add_user(session: AsyncSession, username: str, password_hash: str) -> User:
    """
    Insert a ``User`` row and flush so its id is assigned.

    The insert runs in a savepoint: a concurrent registration that got
    the name first trips the unique index, which is reported as
    ``DuplicateUsernameError`` and leaves the outer transaction usable.
    """
    user = User(username=username, password_hash=password_hash)
    try:
        async with session.begin_nested():
            session.add(user)
            await session.flush()
    except IntegrityError as exc:
        logger.info("Username %s taken by a concurrent registration", username)
        raise DuplicateUsernameError() from exc
    return user


async def add_refresh_token(
    session: AsyncSession,
    user_id: int,
    token_hash: str,
    expires_at: datetime,
) -> RefreshToken:
    """Persist a fresh, unrevoked refresh token for ``user_id``."""
    row = RefreshToken(
        token_hash=token_hash,
        expires_at=expires_at,
        is_revoked=False,
        user_id=user_id,
    )
    session.add(row)
    await session.flush()
    return row


async def revoke_refresh_token(
    session: AsyncSession,
    token_hash: str,
    now: datetime,
) -> Optional[int]:
    """
    Revoke a live refresh token and return its owner's id.

    The revocation is a single conditional UPDATE, so of two requests
    presenting the same token only one sees an affected row. Returns
    ``None`` when the token is unknown, already revoked or expired.
    """
    result = await session.execute(
        update(RefreshToken)
        .where(
            RefreshToken.token_hash == token_hash,
            RefreshToken.is_revoked.is_(False),
            RefreshToken.expires_at > now,
        )
        .values(is_revoked=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.debug("No live refresh token matched for revocation")
        return None

    owner = await session.execute(
        select(RefreshToken.user_id).where(RefreshToken.token_hash == token_hash)
    )
    return owner.scalar_one()
