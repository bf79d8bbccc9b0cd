"""
Shared fixtures: in-memory database, test settings and HTTP clients.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.dependencies import get_settings
from auth.jwt import TokenIssuer
from config.settings import Settings
from core.auth_flow import AuthService
from database.models import Base
from database.session import get_db_session
from main import app


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        jwt_secret="test-secret-key",
        bcrypt_rounds=4,
        exchange_rate_base_url="https://rates.test",
        exchange_rate_api_key="test-key",
    )


@pytest.fixture()
def token_issuer(settings) -> TokenIssuer:
    return TokenIssuer(settings)


@pytest.fixture()
def auth_service(settings, token_issuer) -> AuthService:
    return AuthService(settings, token_issuer)


@pytest_asyncio.fixture()
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@asynccontextmanager
async def _asgi_client(factory, settings):
    async def override_get_db_session():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_settings] = lambda: settings
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(session_factory, settings):
    async with _asgi_client(session_factory, settings) as test_client:
        yield test_client


@pytest_asyncio.fixture()
async def concurrent_client(tmp_path, settings):
    """
    Client over a file-backed SQLite database with one connection per
    request, so simultaneous requests run in separate transactions.
    """
    file_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'concurrent.db'}")
    async with file_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)
    async with _asgi_client(factory, settings) as test_client:
        yield test_client
    await file_engine.dispose()
