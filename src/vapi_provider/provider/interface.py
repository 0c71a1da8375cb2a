"""
Resource lifecycle interface.

The host drives every resource through the same fixed set of calls:
metadata, schema, configure, create, read, update, delete and import.
Configuration, plan and state cross this boundary as plain dictionaries:
a missing key means "not mentioned", a ``None`` value means "explicitly
null".
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from vapi_provider.client import VapiClient, VapiClientError, VapiNotFoundError
from vapi_provider.provider.errors import (
    ConfigurationError,
    ResourceError,
    ResourceNotFoundError,
)
from vapi_provider.provider.schema import Schema
from vapi_provider.shared.logging import bind_correlation_id, get_logger, log_with_context

logger = get_logger(__name__)


class ResourceModel(BaseModel):
    """Host-side attribute model. Unset attributes stay out of ``model_fields_set``."""

    model_config = ConfigDict(extra="forbid", protected_namespaces=())

    def has_value(self, name: str) -> bool:
        return name in self.model_fields_set and getattr(self, name) is not None


StateT = TypeVar("StateT", bound=ResourceModel)


def collect_present(
    source: ResourceModel,
    mapping: Mapping[str, str],
    *,
    keep_nulls: bool,
) -> dict[str, Any]:
    """Project attributes present on ``source`` into API field keyword args.

    Absent attributes are always skipped. Explicit nulls are kept only when
    ``keep_nulls`` is true, which is how an update clears a remote field.
    """
    out: dict[str, Any] = {}
    for attr_name, api_field in mapping.items():
        if attr_name not in source.model_fields_set:
            continue
        value = getattr(source, attr_name)
        if value is None and not keep_nulls:
            continue
        out[api_field] = value
    return out


def plan_changes(plan: Mapping[str, Any], prior: Mapping[str, Any]) -> dict[str, Any]:
    """Attributes of ``plan`` that differ from ``prior`` state.

    A null in the plan survives only when prior state held a value, so an
    attribute that was never set is never sent as null. A changed nested block
    is kept whole, minus sub-attributes that are null on both sides.
    """
    changes: dict[str, Any] = {}
    for name, value in plan.items():
        before = prior.get(name)
        if value == before:
            continue
        if isinstance(value, Mapping):
            changes[name] = compact_block(value, before)
        else:
            changes[name] = value
    return changes


def compact_block(block: Mapping[str, Any], prior_block: Any = None) -> dict[str, Any]:
    """Drop sub-attributes of a nested block that are null now and were null before."""
    before = prior_block if isinstance(prior_block, Mapping) else {}
    return {k: v for k, v in block.items() if v is not None or before.get(k) is not None}


class Resource(ABC, Generic[StateT]):
    """Base class for a resource kind.

    Subclasses implement the ``_create``/``_read``/``_update``/``_delete``
    hooks; this class parses and validates host input, binds a correlation
    ID per call and wraps client errors with the operation and resource kind.
    """

    type_suffix: ClassVar[str]
    display_name: ClassVar[str]
    state_model: ClassVar[type[ResourceModel]]

    def __init__(self) -> None:
        self._client: VapiClient | None = None

    def metadata(self, provider_type_name: str) -> str:
        """Return the resource type name, e.g. ``vapi_assistant``."""
        return f"{provider_type_name}{self.type_suffix}"

    @abstractmethod
    def schema(self) -> Schema:
        ...

    def configure(self, provider_data: Any) -> None:
        """Receive the shared client from the provider."""
        # The host may call configure before the provider is configured.
        if provider_data is None:
            return
        if not isinstance(provider_data, VapiClient):
            raise ConfigurationError(
                "Unexpected Resource Configure Type",
                f"Expected VapiClient, got: {type(provider_data).__name__}. "
                "Please report this issue to the provider developers.",
            )
        self._client = provider_data

    @property
    def client(self) -> VapiClient:
        if self._client is None:
            raise ConfigurationError(
                "Unconfigured Resource",
                f"The {self.display_name} resource was used before the provider was configured.",
            )
        return self._client

    # -- lifecycle ---------------------------------------------------------

    def create(self, plan: Mapping[str, Any]) -> dict[str, Any]:
        """Create the remote record from the planned configuration."""
        self.schema().validate(plan)
        data = self._parse(plan)
        with self._lifecycle("create"):
            return self._create(data)

    def read(self, state: Mapping[str, Any]) -> dict[str, Any]:
        """Refresh state from the remote record.

        Raises:
            ResourceNotFoundError: The record is gone; the host drops it.
            ResourceError: Any other failure; the host keeps prior state.
        """
        data = self._parse(state)
        resource_id = self._require_id(data)
        with self._lifecycle("read"):
            return self._read(resource_id, data)

    def update(self, plan: Mapping[str, Any], state: Mapping[str, Any]) -> dict[str, Any]:
        """Update the remote record in place.

        Only attributes of ``plan`` that differ from ``state`` are sent; an
        explicit null goes out only to clear a value held in prior state.
        """
        self.schema().validate(plan)
        data = self._parse(plan)
        resource_id = state.get("id") or plan.get("id")
        if not resource_id:
            raise ConfigurationError(
                "Missing Resource Identifier",
                f"Cannot update a {self.display_name} without an id in state.",
            )
        changes = plan_changes(plan, state)
        with self._lifecycle("update"):
            return self._update(resource_id, data, changes)

    def delete(self, state: Mapping[str, Any]) -> None:
        """Delete the remote record. An already deleted record is not an error."""
        data = self._parse(state)
        resource_id = self._require_id(data)
        with self._lifecycle("delete"):
            try:
                self._delete(resource_id)
            except VapiNotFoundError:
                log_with_context(
                    logger,
                    logging.INFO,
                    "Resource already deleted",
                    resource_type=self.display_name,
                    resource_id=resource_id,
                )

    def import_state(self, resource_id: str) -> dict[str, Any]:
        """Import by bare identifier, then populate state with a read."""
        if not resource_id or not resource_id.strip():
            raise ConfigurationError(
                "Invalid Import Identifier",
                f"Importing a {self.display_name} requires a non-empty id.",
            )
        return self.read({"id": resource_id.strip()})

    # -- hooks -------------------------------------------------------------

    @abstractmethod
    def _create(self, data: StateT) -> dict[str, Any]:
        ...

    @abstractmethod
    def _read(self, resource_id: str, prior: StateT) -> dict[str, Any]:
        ...

    @abstractmethod
    def _update(self, resource_id: str, data: StateT, changes: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    def _delete(self, resource_id: str) -> None:
        ...

    # -- helpers -----------------------------------------------------------

    def _parse(self, values: Mapping[str, Any]) -> StateT:
        try:
            return self.state_model.model_validate(dict(values))  # type: ignore[return-value]
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid Configuration",
                f"Unable to decode {self.display_name} configuration: {e}",
            ) from e

    def _require_id(self, data: ResourceModel) -> str:
        resource_id = getattr(data, "id", None)
        if not resource_id:
            raise ConfigurationError(
                "Missing Resource Identifier",
                f"The {self.display_name} state has no id.",
            )
        return resource_id

    def _state_from(self, data: ResourceModel, **overrides: Any) -> dict[str, Any]:
        """Full state dict: every schema attribute present, unset ones null."""
        state = self.schema().empty_state()
        state.update(data.model_dump(include=set(state)))
        state.update(overrides)
        return state

    def _refreshed_state(
        self,
        prior: ResourceModel,
        remote_values: Mapping[str, Any],
        resource_id: str,
    ) -> dict[str, Any]:
        """State after a read: remote values win, except sensitive attributes.

        Sensitive attributes keep the prior state value; the API does not
        echo secrets back. Timestamps stay null.
        """
        state = self._state_from(prior)
        state.update(remote_values)
        for name in self.schema().sensitive_paths():
            state[name] = getattr(prior, name, None)
        state["id"] = remote_values.get("id") or resource_id
        state["created_at"] = None
        state["updated_at"] = None
        return state

    @contextmanager
    def _lifecycle(self, operation: str) -> Iterator[None]:
        with bind_correlation_id():
            logger.info(
                "Resource lifecycle call",
                extra={"resource_type": self.display_name, "operation": operation},
            )
            try:
                yield
            except VapiNotFoundError as e:
                raise ResourceNotFoundError(
                    "Resource Not Found",
                    f"Unable to {operation} {self.display_name}, got error: {e}",
                    operation=operation,
                    resource_type=self.display_name,
                ) from e
            except VapiClientError as e:
                raise ResourceError(
                    "Client Error",
                    f"Unable to {operation} {self.display_name}, got error: {e}",
                    operation=operation,
                    resource_type=self.display_name,
                ) from e
