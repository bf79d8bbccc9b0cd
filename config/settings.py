"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings

DEV_JWT_SECRET = "change-me-jwt-secret-key"


class Settings(BaseSettings):
    app_name: str = "MoveBudget API"
    app_version: str = "1.0.0"

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./movebudget.db"

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = DEV_JWT_SECRET                 # HMAC secret for access tokens
    access_token_expiry_minutes: int = 15
    refresh_token_expiry_days: int = 7
    bcrypt_rounds: int = 12                          # bcrypt work factor

    # ── Exchange-rate service ────────────────────────────────────────────
    exchange_rate_base_url: str = "https://api.exchangerate.host"
    exchange_rate_api_key: str = ""
    exchange_rate_timeout_seconds: float = 10.0

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 8000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    def uses_dev_secret(self) -> bool:
        return self.jwt_secret == DEV_JWT_SECRET


config = Settings()
