"""Settings for the Inbo client, proxy and CLI.

Every field can be overridden through an ``INBO_``-prefixed environment
variable or a ``.env`` file in the working directory, e.g.
``INBO_API_BASE_URL=https://staging.example.com``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://inbo-django-api.azurewebsites.net"


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(
        env_prefix="INBO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- Backend / proxy addresses --
    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL, description="Backend API origin"
    )
    app_url: str = Field(
        default="http://localhost:3000",
        description="Same-origin proxy address used for pre-login auth calls",
    )
    request_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout (s)")

    # -- Credentials --
    access_token_ttl_days: int = Field(default=7, gt=0)
    refresh_token_ttl_days: int = Field(default=30, gt=0)
    login_path: str = Field(default="/auth/login", description="Login entry point")
    share_refresh: bool = Field(
        default=True,
        description="Concurrent 401s wait on one shared refresh call",
    )

    # -- Proxy server --
    proxy_host: str = "127.0.0.1"
    proxy_port: int = 3000

    log_level: str = "INFO"
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".inbo")

    @field_validator("api_base_url", "app_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def get_config_dir(settings: Settings | None = None) -> Path:
    """Get/create the directory holding persisted client state."""
    d = (settings or get_settings()).config_dir
    d.mkdir(parents=True, exist_ok=True)
    return d
