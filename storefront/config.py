"""
Configuration and settings for the storefront service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")
    seed_on_startup: bool = Field(default=True)

    # Database (any SQLAlchemy URL: Postgres, SQLite file or sqlite:///:memory:)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Where the public listing comes from
    catalog_source: Literal["database", "marketplace"] = Field(default="database")

    # Store metadata defaults (overridable through the settings table)
    store_name: str = Field(default="MJ TECH")
    store_whatsapp: str = Field(default="https://wa.me/5519995189387")
    store_website: str = Field(default="https://mjtech.net.br")
    store_email: str = Field(default="contato@mjtech.com.br")
    store_permalink: str = Field(default="https://perfil.mercadolivre.com.br/MJ-TECH")

    # Auth
    jwt_secret: str = Field(default="change-me-this-is-a-development-only-secret")
    jwt_algorithm: str = Field(default="HS256")
    token_expiration_hours: int = Field(default=8, ge=1)
    remember_expiration_days: int = Field(default=7, ge=1)
    max_login_attempts: int = Field(default=5, ge=1)
    lockout_seconds: int = Field(default=900, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Seed admin account
    admin_username: str = Field(default="admin_mjtech")
    admin_email: str = Field(default="admin@mjtech.com.br")
    admin_password: str = Field(default="S3nh@F0rt3!2025")
    admin_full_name: str = Field(default="Administrador MJ Tech")

    # Mercado Livre marketplace API
    ml_api_base: str = Field(default="https://api.mercadolibre.com")
    ml_client_id: Optional[str] = Field(default=None)
    ml_client_secret: Optional[str] = Field(default=None)
    ml_seller_id: Optional[str] = Field(default=None)
    ml_nickname: Optional[str] = Field(default=None)
    ml_site_id: str = Field(default="MLB")
    ml_timeout_seconds: float = Field(default=10.0, gt=0)
    ml_result_limit: int = Field(default=12, ge=1, le=50)

    # Product listing cache
    cache_ttl_seconds: int = Field(default=1800, ge=1)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
