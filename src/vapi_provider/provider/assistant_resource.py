"""
Vapi assistant resource (``vapi_assistant``).
"""

from __future__ import annotations

from typing import Any

from vapi_provider.client import Assistant, AssistantModel, AssistantVoice
from vapi_provider.provider import schema as s
from vapi_provider.provider.interface import (
    Resource,
    ResourceModel,
    collect_present,
    compact_block,
)
from vapi_provider.shared.logging import get_logger

logger = get_logger(__name__)

# system_message travels as model.systemPrompt; without a model block the
# API still needs a provider and model, so these are sent alongside it.
DEFAULT_MODEL_PROVIDER = "openai"
DEFAULT_MODEL_NAME = "gpt-4o-mini"


class AssistantModelBlock(ResourceModel):
    provider_type: str | None = None
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    emotion_recognition_enabled: bool | None = None
    num_fast_turns: int | None = None
    tool_ids: list[str] | None = None
    function_ids: list[str] | None = None


class AssistantVoiceBlock(ResourceModel):
    provider_type: str | None = None
    voice_id: str | None = None
    speed: float | None = None
    stability: float | None = None
    similarity_boost: float | None = None
    style: float | None = None
    use_speaker_boost: bool | None = None


class AssistantResourceModel(ResourceModel):
    id: str | None = None
    name: str | None = None
    first_message: str | None = None
    system_message: str | None = None
    model: AssistantModelBlock | None = None
    voice: AssistantVoiceBlock | None = None
    client_messages: list[str] | None = None
    server_messages: list[str] | None = None
    silence_timeout_seconds: int | None = None
    max_duration_seconds: int | None = None
    background_sound: str | None = None
    background_denoising_enabled: bool | None = None
    model_output_in_messages_enabled: bool | None = None
    created_at: str | None = None
    updated_at: str | None = None


# host attribute -> API field, for the flat top-level attributes
ASSISTANT_FIELDS: dict[str, str] = {
    "name": "name",
    "first_message": "first_message",
    "client_messages": "client_messages",
    "server_messages": "server_messages",
    "silence_timeout_seconds": "silence_timeout_seconds",
    "max_duration_seconds": "max_duration_seconds",
    "background_sound": "background_sound",
    "background_denoising_enabled": "background_denoising_enabled",
    "model_output_in_messages_enabled": "model_output_in_messages_enabled",
}

MODEL_FIELDS: dict[str, str] = {
    "provider_type": "provider",
    "model": "model",
    "temperature": "temperature",
    "max_tokens": "max_tokens",
    "emotion_recognition_enabled": "emotion_recognition_enabled",
    "num_fast_turns": "num_fast_turns",
    "tool_ids": "tool_ids",
    "function_ids": "function_ids",
}

VOICE_FIELDS: dict[str, str] = {
    "provider_type": "provider",
    "voice_id": "voice_id",
    "speed": "speed",
    "stability": "stability",
    "similarity_boost": "similarity_boost",
    "style": "style",
    "use_speaker_boost": "use_speaker_boost",
}

ASSISTANT_SCHEMA = s.Schema(
    description="Vapi Assistant resource",
    attributes={
        "id": s.string("Assistant identifier", computed=True),
        "name": s.string("Assistant name", required=True),
        "first_message": s.string("First message the assistant will say", optional=True),
        "system_message": s.string("System message for the assistant", optional=True),
        "model": s.nested(
            "Model configuration for the assistant",
            {
                "provider_type": s.string("Model provider (e.g., openai, anthropic)", required=True),
                "model": s.string("Model name (e.g., gpt-4, claude-3-sonnet)", required=True),
                "temperature": s.float64("Temperature for the model", optional=True),
                "max_tokens": s.int64("Maximum tokens for the model", optional=True),
                "emotion_recognition_enabled": s.boolean(
                    "Whether emotion recognition is enabled", optional=True
                ),
                "num_fast_turns": s.int64("Number of fast turns", optional=True),
                "tool_ids": s.string_list("List of tool IDs", optional=True),
                "function_ids": s.string_list("List of function IDs", optional=True),
            },
            optional=True,
        ),
        "voice": s.nested(
            "Voice configuration for the assistant",
            {
                "provider_type": s.string("Voice provider (e.g., elevenlabs, playht)", required=True),
                "voice_id": s.string("Voice ID", required=True),
                "speed": s.float64("Voice speed", optional=True),
                "stability": s.float64("Voice stability", optional=True),
                "similarity_boost": s.float64("Voice similarity boost", optional=True),
                "style": s.float64("Voice style", optional=True),
                "use_speaker_boost": s.boolean("Whether to use speaker boost", optional=True),
            },
            optional=True,
        ),
        "client_messages": s.string_list("List of client messages", optional=True),
        "server_messages": s.string_list("List of server messages", optional=True),
        "silence_timeout_seconds": s.int64("Silence timeout in seconds", optional=True),
        "max_duration_seconds": s.int64("Maximum duration in seconds", optional=True),
        "background_sound": s.string("Background sound", optional=True),
        "background_denoising_enabled": s.boolean(
            "Whether background denoising is enabled", optional=True
        ),
        "model_output_in_messages_enabled": s.boolean(
            "Whether model output in messages is enabled", optional=True
        ),
        "created_at": s.string("Creation timestamp", computed=True, optional=True),
        "updated_at": s.string("Last update timestamp", computed=True, optional=True),
    },
)


class AssistantResource(Resource[AssistantResourceModel]):
    """Maps ``vapi_assistant`` configuration onto the /assistant collection."""

    type_suffix = "_assistant"
    display_name = "assistant"
    state_model = AssistantResourceModel

    def schema(self) -> s.Schema:
        return ASSISTANT_SCHEMA

    def _create(self, data: AssistantResourceModel) -> dict[str, Any]:
        request = build_assistant_request(data, keep_nulls=False)
        created = self.client.create_assistant(request)

        logger.info(
            "Assistant created",
            extra={"assistant_id": created.id, "fields": sorted(request.model_fields_set)},
        )

        # Timestamps are left null: the API does not return them consistently.
        return self._state_from(data, id=created.id, created_at=None, updated_at=None)

    def _read(self, resource_id: str, prior: AssistantResourceModel) -> dict[str, Any]:
        remote = self.client.get_assistant(resource_id)
        return self._refreshed_state(prior, assistant_to_state(remote, prior), resource_id)

    def _update(
        self,
        resource_id: str,
        data: AssistantResourceModel,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        # system_message rides inside the model block, so a change to either
        # resends both as configured.
        if "model" in changes or "system_message" in changes:
            if "model" not in changes and data.has_value("model"):
                changes["model"] = compact_block(data.model.model_dump(exclude_unset=True))
            if "system_message" not in changes and data.has_value("system_message"):
                changes["system_message"] = data.system_message

        request = build_assistant_request(self._parse(changes), keep_nulls=True)
        self.client.update_assistant(resource_id, request)

        logger.info(
            "Assistant updated",
            extra={"assistant_id": resource_id, "fields": sorted(request.model_fields_set)},
        )
        return self._state_from(data, id=resource_id, created_at=None, updated_at=None)

    def _delete(self, resource_id: str) -> None:
        self.client.delete_assistant(resource_id)


def build_assistant_request(data: AssistantResourceModel, *, keep_nulls: bool) -> Assistant:
    """Project host attributes into an API request.

    Only attributes present in ``data`` are set on the request. With
    ``keep_nulls`` an explicit null is sent as null (update); otherwise it is
    dropped like an absent attribute (create).
    """
    fields = collect_present(data, ASSISTANT_FIELDS, keep_nulls=keep_nulls)

    if data.has_value("model"):
        model_fields = collect_present(data.model, MODEL_FIELDS, keep_nulls=keep_nulls)
        if data.has_value("system_message") or (
            keep_nulls and "system_message" in data.model_fields_set
        ):
            model_fields["system_prompt"] = data.system_message
        fields["model"] = AssistantModel(**model_fields)
    elif data.has_value("system_message"):
        fields["model"] = AssistantModel(
            provider=DEFAULT_MODEL_PROVIDER,
            model=DEFAULT_MODEL_NAME,
            system_prompt=data.system_message,
        )
    elif keep_nulls and "model" in data.model_fields_set:
        fields["model"] = None
    elif keep_nulls and "system_message" in data.model_fields_set:
        # Clearing a system_message set without a model block.
        fields["model"] = AssistantModel(
            provider=DEFAULT_MODEL_PROVIDER,
            model=DEFAULT_MODEL_NAME,
            system_prompt=None,
        )

    if data.has_value("voice"):
        fields["voice"] = AssistantVoice(
            **collect_present(data.voice, VOICE_FIELDS, keep_nulls=keep_nulls)
        )
    elif keep_nulls and "voice" in data.model_fields_set:
        fields["voice"] = None

    return Assistant(**fields)


def assistant_to_state(remote: Assistant, prior: AssistantResourceModel) -> dict[str, Any]:
    """Project a remote assistant onto host attributes (remote wins)."""
    state: dict[str, Any] = {attr: getattr(remote, api) for attr, api in ASSISTANT_FIELDS.items()}
    state["id"] = remote.id

    if remote.model is not None:
        state["system_message"] = remote.model.system_prompt
        keep_null_block = (
            "model" in prior.model_fields_set
            and prior.model is None
            and _is_implicit_default_model(remote.model)
        )
        state["model"] = None if keep_null_block else {
            attr: getattr(remote.model, api) for attr, api in MODEL_FIELDS.items()
        }
    else:
        state["system_message"] = None
        state["model"] = None

    if remote.voice is not None:
        state["voice"] = {attr: getattr(remote.voice, api) for attr, api in VOICE_FIELDS.items()}
    else:
        state["voice"] = None

    return state


def _is_implicit_default_model(model: AssistantModel) -> bool:
    """True when the remote model is the one sent only to carry system_message."""
    if model.provider != DEFAULT_MODEL_PROVIDER or model.model != DEFAULT_MODEL_NAME:
        return False
    tuning = ("temperature", "max_tokens", "emotion_recognition_enabled", "num_fast_turns")
    lists = ("tool_ids", "function_ids")
    return all(getattr(model, name) is None for name in tuning) and all(
        not getattr(model, name) for name in lists
    )
