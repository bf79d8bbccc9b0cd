"""
FastAPI dependencies for authentication.

Provides ``db_session``, the settings-bound services, and the
``get_current_user_id`` dependency used across all protected routes.
The caller's identity is resolved here once per request and passed
explicitly into the services.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenIssuer
from config.settings import Settings, config
from connectors.currency import CurrencyConverter
from core.auth_flow import AuthService
from core.exceptions import InvalidAccessTokenError
from database.session import get_db_session

_bearer_scheme = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    """Process-wide settings; overridden in tests."""
    return config


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_token_issuer(settings: Settings = Depends(get_settings)) -> TokenIssuer:
    return TokenIssuer(settings)


def get_auth_service(
    settings: Settings = Depends(get_settings),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(settings, token_issuer)


def get_currency_converter(settings: Settings = Depends(get_settings)) -> CurrencyConverter:
    return CurrencyConverter(settings)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> int:
    """
    Extract and verify the Bearer token, returning the authenticated
    user id from its ``sub`` claim.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return token_issuer.decode_access_token(credentials.credentials)
    except InvalidAccessTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
