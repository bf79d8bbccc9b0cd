"""
Auth API routes — register, login, refresh.

Route prefix: /api/auth
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_auth_service
from core.auth_flow import AuthService
from utils.schemas import ApiResponse, LoginRequest, RegisterRequest, TokenPair

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=ApiResponse[None])
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new user. 400 if the username already exists."""
    await auth.register(session, req.username, req.password)
    return {"success": True, "message": "User registered"}


@router.post("/login", response_model=TokenPair)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
    auth: AuthService = Depends(get_auth_service),
) -> TokenPair:
    """Login with username + password; returns access and refresh tokens."""
    return await auth.login(session, req.username, req.password)


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    refresh_token: str = Body(..., media_type="application/json"),
    session: AsyncSession = Depends(db_session),
    auth: AuthService = Depends(get_auth_service),
) -> TokenPair:
    """Exchange a refresh token (bare JSON string body) for a new pair."""
    return await auth.refresh(session, refresh_token)
