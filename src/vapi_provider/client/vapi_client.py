"""
Vapi REST API client.

One synchronous HTTP exchange per call: no retries, no backoff and no state
kept between calls besides the immutable base URL, token and the underlying
``httpx.Client``.
"""

from __future__ import annotations

import json
from typing import TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from vapi_provider.client.errors import (
    VapiAPIError,
    VapiNotFoundError,
    VapiSerializationError,
    VapiTransportError,
)
from vapi_provider.client.models import Assistant, PhoneNumber, VapiModel
from vapi_provider.config import DEFAULT_VAPI_URL
from vapi_provider.shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

ASSISTANT_COLLECTION = "assistant"
PHONE_NUMBER_COLLECTION = "phone-number"

M = TypeVar("M", bound=VapiModel)


class VapiClient:
    """Client for the Vapi assistant and phone-number collections.

    Safe to share between resources: nothing on the instance changes after
    construction.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_VAPI_URL,
        token: str = "",
        http_client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=httpx.Timeout(self._timeout))
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> VapiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _url(self, collection: str, resource_id: str | None = None) -> str:
        if resource_id is None:
            return f"{self._base_url}/{collection}"
        return f"{self._base_url}/{collection}/{resource_id}"

    def _encode(self, body: VapiModel, operation: str, resource_type: str) -> bytes:
        try:
            return json.dumps(body.to_payload()).encode("utf-8")
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise VapiSerializationError(
                f"error marshaling {resource_type}: {e}",
                operation=operation,
                resource_type=resource_type,
            ) from e

    def _send(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        resource_type: str,
        expected: tuple[int, ...],
        body: VapiModel | None = None,
        not_found_is_distinct: bool = False,
    ) -> httpx.Response:
        """Perform one HTTP exchange and map its status to an outcome."""
        headers = {"Authorization": f"Bearer {self._token}"}
        content: bytes | None = None
        if body is not None:
            content = self._encode(body, operation, resource_type)
            headers["Content-Type"] = "application/json"

        logger.debug(
            "Vapi request",
            extra={
                "method": method,
                "url": url,
                "operation": operation,
                "fields": sorted(body.model_fields_set) if body is not None else [],
            },
        )

        try:
            response = self._get_client().request(
                method,
                url,
                content=content,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(
                "Vapi request failed",
                extra={
                    "method": method,
                    "url": url,
                    "operation": operation,
                    "error": str(e),
                },
            )
            raise VapiTransportError(
                f"error making request: {e!s}",
                operation=operation,
                resource_type=resource_type,
            ) from e

        if response.status_code == 404 and not_found_is_distinct:
            raise VapiNotFoundError(
                f"{resource_type} not found",
                operation=operation,
                resource_type=resource_type,
            )

        if response.status_code not in expected:
            logger.error(
                "Vapi API error",
                extra={
                    "method": method,
                    "url": url,
                    "operation": operation,
                    "status_code": response.status_code,
                },
            )
            raise VapiAPIError(
                status_code=response.status_code,
                body=response.text,
                operation=operation,
                resource_type=resource_type,
            )

        return response

    def _decode(
        self,
        response: httpx.Response,
        model_cls: type[M],
        operation: str,
        resource_type: str,
    ) -> M:
        if not response.content:
            return model_cls()
        try:
            return model_cls.model_validate_json(response.content)
        except ValidationError as e:
            raise VapiSerializationError(
                f"error unmarshaling response: {e}",
                operation=operation,
                resource_type=resource_type,
            ) from e

    def _decode_list(
        self,
        response: httpx.Response,
        model_cls: type[M],
        operation: str,
        resource_type: str,
    ) -> list[M]:
        if not response.content:
            return []
        try:
            return TypeAdapter(list[model_cls]).validate_json(response.content)  # type: ignore[valid-type]
        except ValidationError as e:
            raise VapiSerializationError(
                f"error unmarshaling response: {e}",
                operation=operation,
                resource_type=resource_type,
            ) from e

    # -- generic CRUD ------------------------------------------------------

    def _create(self, collection: str, resource_type: str, body: M) -> M:
        response = self._send(
            "POST",
            self._url(collection),
            operation="create",
            resource_type=resource_type,
            expected=(201,),
            body=body,
        )
        created = self._decode(response, type(body), "create", resource_type)
        # The id is the only handle for later reads and deletes.
        if not getattr(created, "id", None):
            raise VapiSerializationError(
                f"error unmarshaling response: created {resource_type} has no id",
                operation="create",
                resource_type=resource_type,
            )
        return created

    def _get(self, collection: str, resource_type: str, model_cls: type[M], resource_id: str) -> M:
        response = self._send(
            "GET",
            self._url(collection, resource_id),
            operation="get",
            resource_type=resource_type,
            expected=(200,),
            not_found_is_distinct=True,
        )
        return self._decode(response, model_cls, "get", resource_type)

    def _update(self, collection: str, resource_type: str, resource_id: str, body: M) -> M:
        response = self._send(
            "PATCH",
            self._url(collection, resource_id),
            operation="update",
            resource_type=resource_type,
            expected=(200,),
            body=body,
            not_found_is_distinct=True,
        )
        return self._decode(response, type(body), "update", resource_type)

    def _delete(self, collection: str, resource_type: str, resource_id: str) -> None:
        self._send(
            "DELETE",
            self._url(collection, resource_id),
            operation="delete",
            resource_type=resource_type,
            expected=(200, 204),
            not_found_is_distinct=True,
        )

    def _list(self, collection: str, resource_type: str, model_cls: type[M]) -> list[M]:
        response = self._send(
            "GET",
            self._url(collection),
            operation="list",
            resource_type=resource_type,
            expected=(200,),
        )
        return self._decode_list(response, model_cls, "list", resource_type)

    # -- assistants --------------------------------------------------------

    def create_assistant(self, assistant: Assistant) -> Assistant:
        """Create an assistant (expects HTTP 201)."""
        return self._create(ASSISTANT_COLLECTION, "assistant", assistant)

    def get_assistant(self, assistant_id: str) -> Assistant:
        """Fetch an assistant by ID. Raises VapiNotFoundError on 404."""
        return self._get(ASSISTANT_COLLECTION, "assistant", Assistant, assistant_id)

    def update_assistant(self, assistant_id: str, assistant: Assistant) -> Assistant:
        """PATCH an assistant with only the fields set on ``assistant``."""
        return self._update(ASSISTANT_COLLECTION, "assistant", assistant_id, assistant)

    def delete_assistant(self, assistant_id: str) -> None:
        self._delete(ASSISTANT_COLLECTION, "assistant", assistant_id)

    def list_assistants(self) -> list[Assistant]:
        return self._list(ASSISTANT_COLLECTION, "assistant", Assistant)

    # -- phone numbers -----------------------------------------------------

    def create_phone_number(self, phone_number: PhoneNumber) -> PhoneNumber:
        """Create a phone number (expects HTTP 201)."""
        return self._create(PHONE_NUMBER_COLLECTION, "phone number", phone_number)

    def get_phone_number(self, phone_number_id: str) -> PhoneNumber:
        """Fetch a phone number by ID. Raises VapiNotFoundError on 404."""
        return self._get(PHONE_NUMBER_COLLECTION, "phone number", PhoneNumber, phone_number_id)

    def update_phone_number(self, phone_number_id: str, phone_number: PhoneNumber) -> PhoneNumber:
        return self._update(PHONE_NUMBER_COLLECTION, "phone number", phone_number_id, phone_number)

    def delete_phone_number(self, phone_number_id: str) -> None:
        self._delete(PHONE_NUMBER_COLLECTION, "phone number", phone_number_id)

    def list_phone_numbers(self) -> list[PhoneNumber]:
        return self._list(PHONE_NUMBER_COLLECTION, "phone number", PhoneNumber)

