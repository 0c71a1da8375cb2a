"""
Attribute schemas for the provider and its resources.

A schema declares, per attribute, its type and whether it is required,
optional, computed, sensitive or replace-on-change. The host uses it to
validate configuration and to decide between an in-place update and a
replacement.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vapi_provider.provider.errors import ConfigurationError


class AttributeType(str, Enum):
    """Attribute value types."""

    STRING = "string"
    INT64 = "int64"
    FLOAT64 = "float64"
    BOOL = "bool"
    LIST = "list"
    OBJECT = "object"


@dataclass(frozen=True)
class Attribute:
    """One attribute of a schema. OBJECT attributes nest further attributes."""

    type: AttributeType
    description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    sensitive: bool = False
    requires_replace: bool = False
    element_type: AttributeType | None = None
    attributes: Mapping[str, "Attribute"] = field(default_factory=dict)


def string(description: str = "", **flags: bool) -> Attribute:
    return Attribute(AttributeType.STRING, description, **flags)


def int64(description: str = "", **flags: bool) -> Attribute:
    return Attribute(AttributeType.INT64, description, **flags)


def float64(description: str = "", **flags: bool) -> Attribute:
    return Attribute(AttributeType.FLOAT64, description, **flags)


def boolean(description: str = "", **flags: bool) -> Attribute:
    return Attribute(AttributeType.BOOL, description, **flags)


def string_list(description: str = "", **flags: bool) -> Attribute:
    return Attribute(AttributeType.LIST, description, element_type=AttributeType.STRING, **flags)


def nested(description: str, attributes: Mapping[str, Attribute], **flags: bool) -> Attribute:
    return Attribute(AttributeType.OBJECT, description, attributes=attributes, **flags)


@dataclass(frozen=True)
class Schema:
    """Attribute set of a provider or resource."""

    attributes: Mapping[str, Attribute]
    description: str = ""

    def sensitive_paths(self) -> set[str]:
        """Top-level attributes never refreshed from the remote API."""
        return {name for name, attr in self.attributes.items() if attr.sensitive}

    def requires_replace(
        self,
        prior_state: Mapping[str, Any] | None,
        plan: Mapping[str, Any],
    ) -> list[str]:
        """Replace-on-change attributes whose planned value differs from state.

        A non-empty result means the host must delete and recreate the
        resource instead of updating it in place.
        """
        if not prior_state:
            return []
        changed = []
        for name, attr in self.attributes.items():
            if not attr.requires_replace or name not in plan:
                continue
            if prior_state.get(name) is not None and plan[name] != prior_state.get(name):
                changed.append(name)
        return changed

    def validate(self, config: Mapping[str, Any]) -> None:
        """Check attribute names and required attributes, recursing into blocks.

        Raises:
            ConfigurationError: On unknown attributes, missing required
                attributes or a nested block that is not an object.
        """
        _validate_attributes(self.attributes, config, path="")

    def empty_state(self) -> dict[str, Any]:
        return {name: None for name in self.attributes}


def _validate_attributes(
    attributes: Mapping[str, Attribute],
    config: Mapping[str, Any],
    path: str,
) -> None:
    unknown = sorted(set(config) - set(attributes))
    if unknown:
        raise ConfigurationError(
            "Unsupported Argument",
            f"An argument named '{path}{unknown[0]}' is not expected here.",
        )

    for name, attr in attributes.items():
        value = config.get(name)
        if attr.required and value is None:
            raise ConfigurationError(
                "Missing required argument",
                f"The argument '{path}{name}' is required, but no definition was found.",
            )
        if attr.type is AttributeType.OBJECT and value is not None:
            if not isinstance(value, Mapping):
                raise ConfigurationError(
                    "Invalid Attribute Value",
                    f"The argument '{path}{name}' must be an object.",
                )
            _validate_attributes(attr.attributes, value, path=f"{path}{name}.")
