"""
Provider connection configuration.

Two values are resolved: the API base URL and the API token.

- url:   ``url`` attribute > VAPI_URL > https://api.vapi.ai
- token: ``token`` or ``api_key`` attribute > VAPI_API_KEY (no default)

An empty string counts as unset at every level.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from vapi_provider.config import Settings, get_settings
from vapi_provider.provider.errors import ConfigurationError
from vapi_provider.provider.schema import Schema, string

PROVIDER_SCHEMA = Schema(
    description="Vapi provider",
    attributes={
        "url": string("Vapi API base URL", optional=True),
        "token": string("Vapi API token", optional=True, sensitive=True),
        "api_key": string("Vapi API token (alias of token)", optional=True, sensitive=True),
    },
)


@dataclass(frozen=True)
class ProviderConfig:
    """Resolved connection settings."""

    url: str
    token: str


def _explicit(config: Mapping[str, Any], *names: str) -> str:
    for name in names:
        value = config.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def resolve_provider_config(
    config: Mapping[str, Any] | None = None,
    settings: Settings | None = None,
) -> ProviderConfig:
    """Resolve URL and token from explicit config, then environment, then defaults.

    Raises:
        ConfigurationError: If no token is found in either source.
    """
    config = config or {}
    PROVIDER_SCHEMA.validate(config)
    settings = settings or get_settings()

    url = _explicit(config, "url") or settings.vapi_url
    token = _explicit(config, "token", "api_key") or settings.vapi_api_key.strip()

    if not token:
        raise ConfigurationError(
            "Unable to find token",
            "Token cannot be an empty string. Please set the token in the provider "
            "configuration or set the VAPI_API_KEY environment variable.",
        )

    return ProviderConfig(url=url, token=token)
