"""
Vapi phone number resource (``vapi_phone_number``).

The number itself is creation-only: changing it replaces the resource, so it
is never part of an update request.
"""

from __future__ import annotations

from typing import Any

from vapi_provider.client import PhoneNumber
from vapi_provider.provider import schema as s
from vapi_provider.provider.interface import Resource, ResourceModel, collect_present
from vapi_provider.shared.logging import get_logger

logger = get_logger(__name__)


class PhoneNumberResourceModel(ResourceModel):
    id: str | None = None
    number: str | None = None
    name: str | None = None
    assistant_id: str | None = None
    squad_id: str | None = None
    server_url: str | None = None
    server_url_secret: str | None = None
    provider_type: str | None = None
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    vonage_api_key: str | None = None
    vonage_api_secret: str | None = None
    vonage_application_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


# host attribute -> API field, excluding the creation-only number
PHONE_NUMBER_FIELDS: dict[str, str] = {
    "name": "name",
    "assistant_id": "assistant_id",
    "squad_id": "squad_id",
    "server_url": "server_url",
    "server_url_secret": "server_url_secret",
    "provider_type": "provider",
    "twilio_account_sid": "twilio_account_sid",
    "twilio_auth_token": "twilio_auth_token",
    "vonage_api_key": "vonage_api_key",
    "vonage_api_secret": "vonage_api_secret",
    "vonage_application_id": "vonage_application_id",
}

PHONE_NUMBER_SCHEMA = s.Schema(
    description="Vapi Phone Number resource",
    attributes={
        "id": s.string("Phone number identifier", computed=True),
        "number": s.string(
            "Phone number in E.164 format (e.g., +1234567890)",
            required=True,
            requires_replace=True,
        ),
        "name": s.string("Display name for the phone number", optional=True),
        "assistant_id": s.string("Assistant ID to handle calls on this number", optional=True),
        "squad_id": s.string("Squad ID to handle calls on this number", optional=True),
        "server_url": s.string("Server URL for webhooks", optional=True),
        "server_url_secret": s.string(
            "Secret for server URL webhook verification", optional=True, sensitive=True
        ),
        "provider_type": s.string("Telephony provider (twilio, vonage)", optional=True),
        "twilio_account_sid": s.string(
            "Twilio Account SID (required if provider is twilio)", optional=True, sensitive=True
        ),
        "twilio_auth_token": s.string(
            "Twilio Auth Token (required if provider is twilio)", optional=True, sensitive=True
        ),
        "vonage_api_key": s.string(
            "Vonage API Key (required if provider is vonage)", optional=True, sensitive=True
        ),
        "vonage_api_secret": s.string(
            "Vonage API Secret (required if provider is vonage)", optional=True, sensitive=True
        ),
        "vonage_application_id": s.string(
            "Vonage Application ID (required if provider is vonage)", optional=True
        ),
        "created_at": s.string("Creation timestamp", computed=True, optional=True),
        "updated_at": s.string("Last update timestamp", computed=True, optional=True),
    },
)


class PhoneNumberResource(Resource[PhoneNumberResourceModel]):
    """Maps ``vapi_phone_number`` configuration onto the /phone-number collection."""

    type_suffix = "_phone_number"
    display_name = "phone number"
    state_model = PhoneNumberResourceModel

    def schema(self) -> s.Schema:
        return PHONE_NUMBER_SCHEMA

    def _create(self, data: PhoneNumberResourceModel) -> dict[str, Any]:
        fields = collect_present(data, PHONE_NUMBER_FIELDS, keep_nulls=False)
        request = PhoneNumber(number=data.number, **fields)
        created = self.client.create_phone_number(request)

        logger.info(
            "Phone number created",
            extra={"phone_number_id": created.id, "fields": sorted(request.model_fields_set)},
        )
        return self._state_from(data, id=created.id, created_at=None, updated_at=None)

    def _read(self, resource_id: str, prior: PhoneNumberResourceModel) -> dict[str, Any]:
        remote = self.client.get_phone_number(resource_id)
        values = {attr: getattr(remote, api) for attr, api in PHONE_NUMBER_FIELDS.items()}
        values["id"] = remote.id
        values["number"] = remote.number
        return self._refreshed_state(prior, values, resource_id)

    def _update(
        self,
        resource_id: str,
        data: PhoneNumberResourceModel,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        # number is replace-on-change and never sent here.
        delta = self._parse(changes)
        request = PhoneNumber(**collect_present(delta, PHONE_NUMBER_FIELDS, keep_nulls=True))
        self.client.update_phone_number(resource_id, request)

        logger.info(
            "Phone number updated",
            extra={"phone_number_id": resource_id, "fields": sorted(request.model_fields_set)},
        )
        return self._state_from(data, id=resource_id, created_at=None, updated_at=None)

    def _delete(self, resource_id: str) -> None:
        self.client.delete_phone_number(resource_id)
