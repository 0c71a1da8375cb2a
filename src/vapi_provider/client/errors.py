"""
Vapi client error taxonomy.

Every error carries the operation (create/get/update/delete/list) and the
resource kind it happened on, so callers can surface it without extra
bookkeeping.
"""


class VapiClientError(Exception):
    """Base exception for Vapi API client errors."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        resource_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.resource_type = resource_type


class VapiTransportError(VapiClientError):
    """Connection, timeout or TLS failure before a response was received."""


class VapiSerializationError(VapiClientError):
    """Request body could not be encoded or response body decoded."""


class VapiNotFoundError(VapiClientError):
    """The addressed resource does not exist (HTTP 404)."""


class VapiAPIError(VapiClientError):
    """Unexpected HTTP status. Keeps the raw response body for diagnostics."""

    def __init__(
        self,
        status_code: int,
        body: str,
        operation: str | None = None,
        resource_type: str | None = None,
    ) -> None:
        super().__init__(
            f"API error: {status_code} - {body}",
            operation=operation,
            resource_type=resource_type,
        )
        self.status_code = status_code
        self.body = body
