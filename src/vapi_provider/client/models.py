"""
Wire models for the Vapi REST API.

Every optional field is tri-state: a field never assigned is absent (not in
``model_fields_set``), a field assigned ``None`` is an explicit null, and
anything else is a value. ``to_payload`` drops absent fields only, so an
explicit null still reaches the API as JSON ``null``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class VapiModel(BaseModel):
    """Base for API payloads (camelCase on the wire, snake_case in Python)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize only the fields that were explicitly set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def is_set(self, field_name: str) -> bool:
        return field_name in self.model_fields_set


class AssistantModel(VapiModel):
    """Model (LLM) configuration of an assistant."""

    provider: str | None = None
    model: str | None = None
    system_prompt: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    emotion_recognition_enabled: bool | None = None
    num_fast_turns: int | None = None
    tool_ids: list[str] | None = None
    function_ids: list[str] | None = None


class AssistantVoice(VapiModel):
    """Voice (TTS) configuration of an assistant."""

    provider: str | None = None
    voice_id: str | None = None
    speed: float | None = None
    stability: float | None = None
    similarity_boost: float | None = None
    style: float | None = None
    use_speaker_boost: bool | None = None


class Assistant(VapiModel):
    """A Vapi assistant."""

    id: str | None = None
    name: str | None = None
    first_message: str | None = None
    model: AssistantModel | None = None
    voice: AssistantVoice | None = None
    client_messages: list[str] | None = None
    server_messages: list[str] | None = None
    silence_timeout_seconds: int | None = None
    max_duration_seconds: int | None = None
    background_sound: str | None = None
    background_denoising_enabled: bool | None = None
    model_output_in_messages_enabled: bool | None = None
    transport_configurations: list[dict[str, Any]] | None = None
    created_at: str | None = None
    updated_at: str | None = None


class PhoneNumber(VapiModel):
    """A Vapi phone number."""

    id: str | None = None
    number: str | None = None
    name: str | None = None
    assistant_id: str | None = None
    squad_id: str | None = None
    server_url: str | None = None
    server_url_secret: str | None = None
    provider: str | None = None
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    vonage_api_key: str | None = None
    vonage_api_secret: str | None = None
    vonage_application_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
