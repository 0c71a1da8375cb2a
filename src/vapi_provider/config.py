"""
Provider configuration with environment-driven settings.

Values resolve with the precedence: explicit provider config > environment
(or .env) > declared default. There is no default credential.
"""

import os
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_VAPI_URL = "https://api.vapi.ai"


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = "INFO"

    vapi_url: str = Field(
        default=DEFAULT_VAPI_URL,
        description="Vapi API base URL (VAPI_URL)",
    )
    vapi_api_key: str = Field(
        default="",
        description="Vapi API token (VAPI_API_KEY)",
    )

    @field_validator("vapi_url", mode="before")
    @classmethod
    def default_blank_url(cls, v: str | None) -> str:
        """An empty VAPI_URL behaves like an unset one."""
        if v is None or not str(v).strip():
            return DEFAULT_VAPI_URL
        return str(v).strip()


@lru_cache(maxsize=1)
def _get_settings_cached() -> Settings:
    return Settings()


def get_settings() -> Settings:
    # Tests monkeypatch the environment between cases, so never reuse a
    # cached instance under pytest.
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return Settings()
    return _get_settings_cached()
