"""
Vapi provider root.

Resolves connection settings once per plugin invocation, builds the single
shared VapiClient and hands it to every resource it creates.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from vapi_provider import __version__
from vapi_provider.client import VapiClient
from vapi_provider.provider.assistant_resource import AssistantResource
from vapi_provider.provider.config import PROVIDER_SCHEMA, resolve_provider_config
from vapi_provider.provider.errors import ConfigurationError
from vapi_provider.provider.interface import Resource
from vapi_provider.provider.phone_number_resource import PhoneNumberResource
from vapi_provider.provider.schema import Schema
from vapi_provider.shared.logging import get_logger, mask_secret, setup_logging

logger = get_logger(__name__)

PROVIDER_TYPE_NAME = "vapi"


@dataclass(frozen=True)
class ProviderMetadata:
    type_name: str
    version: str


class VapiProvider:
    """Provider root: configuration, shared client and resource registry."""

    def __init__(self, version: str = "dev", http_client: httpx.Client | None = None) -> None:
        # version is the release version, "dev" for local builds and "test"
        # under acceptance tests.
        self.version = version
        self._http_client = http_client
        self._client: VapiClient | None = None

    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(type_name=PROVIDER_TYPE_NAME, version=self.version)

    def schema(self) -> Schema:
        return PROVIDER_SCHEMA

    def configure(self, config: Mapping[str, Any] | None = None) -> VapiClient:
        """Resolve connection settings and build the shared client.

        The client is set once; configuring the same provider twice is an error.

        Raises:
            ConfigurationError: No token resolvable, or already configured.
        """
        if self._client is not None:
            raise ConfigurationError(
                "Provider Already Configured",
                "The Vapi provider can only be configured once per invocation.",
            )

        resolved = resolve_provider_config(config)

        logger.info(
            "Vapi provider configured",
            extra={
                "url": resolved.url,
                "token": mask_secret(resolved.token),
                "version": self.version,
            },
        )

        self._client = VapiClient(
            base_url=resolved.url,
            token=resolved.token,
            http_client=self._http_client,
        )
        return self._client

    @property
    def client(self) -> VapiClient | None:
        return self._client

    def resources(self) -> list[Callable[[], Resource[Any]]]:
        return [AssistantResource, PhoneNumberResource]

    def resource_types(self) -> dict[str, Callable[[], Resource[Any]]]:
        """Map resource type names to constructors."""
        return {factory().metadata(PROVIDER_TYPE_NAME): factory for factory in self.resources()}

    def new_resource(self, type_name: str) -> Resource[Any]:
        """Instantiate a resource by type name, configured with the shared client.

        Raises:
            ConfigurationError: For an unknown resource type.
        """
        factory = self.resource_types().get(type_name)
        if factory is None:
            raise ConfigurationError(
                "Unknown Resource Type",
                f"The provider does not support resource type {type_name!r}.",
            )
        resource = factory()
        resource.configure(self._client)
        return resource

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


def new(version: str = __version__) -> Callable[[], VapiProvider]:
    """Plugin entry point: a factory producing a fresh provider per invocation."""

    def factory() -> VapiProvider:
        setup_logging()
        return VapiProvider(version=version)

    return factory
