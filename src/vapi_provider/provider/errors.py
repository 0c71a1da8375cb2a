"""
Host-facing errors.

Every error surfaced to the host carries a short summary and a detail line,
the same pair the host renders as a diagnostic.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Diagnostic:
    """A user-visible diagnostic."""

    summary: str
    detail: str
    severity: str = "error"


class ProviderError(Exception):
    """Base exception for errors surfaced to the host."""

    def __init__(self, summary: str, detail: str = "") -> None:
        super().__init__(f"{summary}: {detail}" if detail else summary)
        self.summary = summary
        self.detail = detail

    @property
    def diagnostic(self) -> Diagnostic:
        return Diagnostic(summary=self.summary, detail=self.detail)


class ConfigurationError(ProviderError):
    """Provider or resource configuration is missing or malformed."""


class ResourceError(ProviderError):
    """A lifecycle call on a resource failed."""

    def __init__(
        self,
        summary: str,
        detail: str = "",
        operation: str | None = None,
        resource_type: str | None = None,
    ) -> None:
        super().__init__(summary, detail)
        self.operation = operation
        self.resource_type = resource_type


class ResourceNotFoundError(ResourceError):
    """The remote record is gone; the host should drop it from state."""
