"""
Settings — environment-driven configuration.

    STOREFRONT_DATABASE_URL=postgresql+asyncpg://...
    STOREFRONT_RAZORPAY_KEY_ID=rzp_live_...
    STOREFRONT_RAZORPAY_KEY_SECRET=...

Loaded once by the application factory and passed down explicitly.
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
    )

    database_url: str = "sqlite+aiosqlite:///./storefront.db"

    # Payment gateway
    razorpay_key_id: str = ""
    razorpay_key_secret: SecretStr = SecretStr("")
    razorpay_base_url: str = "https://api.razorpay.com/v1"
    gateway_timeout_seconds: float = Field(default=10.0, gt=0)

    # Identity provider
    supabase_url: str = ""
    supabase_anon_key: SecretStr = SecretStr("")
    identity_timeout_seconds: float = Field(default=5.0, gt=0)

    default_currency: str = "INR"
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


__all__ = ("Settings",)
