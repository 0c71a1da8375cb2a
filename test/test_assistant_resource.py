"""Tests for the vapi_assistant resource adapter."""

from unittest.mock import MagicMock

import httpx
import pytest

from vapi_provider.client import VapiClient
from vapi_provider.provider.assistant_resource import AssistantResource
from vapi_provider.provider.errors import (
    ConfigurationError,
    ResourceError,
    ResourceNotFoundError,
)


@pytest.fixture
def resource(vapi_client: VapiClient) -> AssistantResource:
    r = AssistantResource()
    r.configure(vapi_client)
    return r


REMOTE_ASSISTANT = {
    "id": "abc123",
    "orgId": "org-1",
    "name": "Support Bot",
    "firstMessage": "Hi, how can I help?",
    "model": {
        "provider": "anthropic",
        "model": "claude-3-sonnet",
        "systemPrompt": "Be brief.",
        "temperature": 0.2,
        "toolIds": ["t1"],
        "messages": [{"role": "system", "content": "Be brief."}],
    },
    "voice": {"provider": "11labs", "voiceId": "rachel", "stability": 0.5},
    "clientMessages": ["transcript"],
    "silenceTimeoutSeconds": 20,
    "backgroundSound": "office",
    "createdAt": "2024-01-15T10:30:00Z",
    "updatedAt": "2024-01-16T10:30:00Z",
}


class TestAssistantMetadata:
    def test_type_name(self) -> None:
        assert AssistantResource().metadata("vapi") == "vapi_assistant"

    def test_schema_flags(self) -> None:
        schema = AssistantResource().schema()

        assert schema.attributes["name"].required
        assert schema.attributes["id"].computed
        assert schema.attributes["model"].attributes["provider_type"].required
        assert schema.attributes["voice"].attributes["voice_id"].required
        assert schema.sensitive_paths() == set()

    def test_unconfigured_resource_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            AssistantResource().create({"name": "Bot"})

    def test_configure_rejects_wrong_type(self) -> None:
        with pytest.raises(ConfigurationError, match="Unexpected Resource Configure Type"):
            AssistantResource().configure(object())

    def test_configure_ignores_missing_provider_data(self) -> None:
        resource = AssistantResource()
        resource.configure(None)

        with pytest.raises(ConfigurationError):
            _ = resource.client


class TestAssistantCreate:
    def test_name_only(self, resource: AssistantResource, respond, last_request) -> None:
        respond(201, {"id": "abc123", "name": "Support Bot"})

        state = resource.create({"name": "Support Bot"})

        method, url, body, _ = last_request()
        assert method == "POST"
        assert url.endswith("/assistant")
        assert body == {"name": "Support Bot"}
        assert state["id"] == "abc123"
        assert state["name"] == "Support Bot"
        assert state["created_at"] is None
        assert state["updated_at"] is None

    def test_timestamps_stay_null_even_when_returned(
        self, resource: AssistantResource, respond
    ) -> None:
        respond(201, REMOTE_ASSISTANT)

        state = resource.create({"name": "Support Bot"})

        assert state["created_at"] is None
        assert state["updated_at"] is None

    @pytest.mark.parametrize("body", [None, {}])
    def test_create_without_id_is_an_error(
        self, resource: AssistantResource, respond, body
    ) -> None:
        respond(201, body)

        with pytest.raises(ResourceError, match="Unable to create assistant"):
            resource.create({"name": "Support Bot"})

    def test_null_and_absent_fields_are_omitted(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(201, {"id": "a1"})

        resource.create({"name": "Bot", "first_message": None, "voice": None})

        _, _, body, _ = last_request()
        assert body == {"name": "Bot"}

    def test_full_mapping(self, resource: AssistantResource, respond, last_request) -> None:
        respond(201, {"id": "a1"})

        state = resource.create(
            {
                "name": "Bot",
                "first_message": "Hello",
                "model": {
                    "provider_type": "openai",
                    "model": "gpt-4",
                    "temperature": 0.7,
                    "function_ids": ["f1", "f2"],
                },
                "voice": {
                    "provider_type": "playht",
                    "voice_id": "jennifer",
                    "similarity_boost": 0.75,
                    "use_speaker_boost": True,
                },
                "client_messages": ["transcript", "hang"],
                "server_messages": [],
                "max_duration_seconds": 600,
                "background_denoising_enabled": False,
                "model_output_in_messages_enabled": True,
            }
        )

        _, _, body, _ = last_request()
        assert body == {
            "name": "Bot",
            "firstMessage": "Hello",
            "model": {
                "provider": "openai",
                "model": "gpt-4",
                "temperature": 0.7,
                "functionIds": ["f1", "f2"],
            },
            "voice": {
                "provider": "playht",
                "voiceId": "jennifer",
                "similarityBoost": 0.75,
                "useSpeakerBoost": True,
            },
            "clientMessages": ["transcript", "hang"],
            "serverMessages": [],
            "maxDurationSeconds": 600,
            "backgroundDenoisingEnabled": False,
            "modelOutputInMessagesEnabled": True,
        }
        assert state["model"]["temperature"] == 0.7
        assert state["model"]["max_tokens"] is None
        assert state["silence_timeout_seconds"] is None

    def test_system_message_without_model_uses_default_model(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(201, {"id": "a1"})

        state = resource.create({"name": "Bot", "system_message": "You are helpful."})

        _, _, body, _ = last_request()
        assert body == {
            "name": "Bot",
            "model": {
                "provider": "openai",
                "model": "gpt-4o-mini",
                "systemPrompt": "You are helpful.",
            },
        }
        assert state["model"] is None
        assert state["system_message"] == "You are helpful."

    def test_system_message_joins_configured_model(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(201, {"id": "a1"})

        resource.create(
            {
                "name": "Bot",
                "system_message": "Be brief.",
                "model": {"provider_type": "anthropic", "model": "claude-3-sonnet"},
            }
        )

        _, _, body, _ = last_request()
        assert body["model"] == {
            "provider": "anthropic",
            "model": "claude-3-sonnet",
            "systemPrompt": "Be brief.",
        }

    def test_missing_name_is_configuration_error(
        self, resource: AssistantResource, mock_http: MagicMock
    ) -> None:
        with pytest.raises(ConfigurationError, match="name"):
            resource.create({"first_message": "Hi"})

        mock_http.request.assert_not_called()

    def test_nested_block_missing_required_field(
        self, resource: AssistantResource, mock_http: MagicMock
    ) -> None:
        with pytest.raises(ConfigurationError, match="voice.voice_id"):
            resource.create({"name": "Bot", "voice": {"provider_type": "playht"}})

        mock_http.request.assert_not_called()

    def test_unknown_attribute(self, resource: AssistantResource) -> None:
        with pytest.raises(ConfigurationError, match="colour"):
            resource.create({"name": "Bot", "colour": "blue"})

    def test_wrong_type(self, resource: AssistantResource) -> None:
        with pytest.raises(ConfigurationError, match="Invalid Configuration"):
            resource.create({"name": "Bot", "silence_timeout_seconds": "a while"})

    def test_api_error_is_wrapped_with_context(self, resource: AssistantResource, respond) -> None:
        respond(400, text='{"message":["name must be shorter than or equal to 40 characters"]}')

        with pytest.raises(ResourceError) as exc_info:
            resource.create({"name": "x" * 41})

        err = exc_info.value
        assert err.summary == "Client Error"
        assert err.operation == "create"
        assert err.resource_type == "assistant"
        assert err.detail.startswith("Unable to create assistant, got error: API error: 400 - ")
        assert "shorter than or equal to 40" in err.detail
        assert err.diagnostic.severity == "error"


class TestAssistantRead:
    def test_refreshes_from_remote(self, resource: AssistantResource, respond, last_request) -> None:
        respond(200, REMOTE_ASSISTANT)

        state = resource.read({"id": "abc123", "name": "Old name", "max_duration_seconds": 300})

        method, url, _, _ = last_request()
        assert method == "GET"
        assert url.endswith("/assistant/abc123")
        assert state["name"] == "Support Bot"
        assert state["first_message"] == "Hi, how can I help?"
        assert state["system_message"] == "Be brief."
        assert state["model"] == {
            "provider_type": "anthropic",
            "model": "claude-3-sonnet",
            "temperature": 0.2,
            "max_tokens": None,
            "emotion_recognition_enabled": None,
            "num_fast_turns": None,
            "tool_ids": ["t1"],
            "function_ids": None,
        }
        assert state["voice"]["voice_id"] == "rachel"
        assert state["voice"]["provider_type"] == "11labs"
        assert state["client_messages"] == ["transcript"]
        assert state["max_duration_seconds"] is None
        assert state["created_at"] is None
        assert state["updated_at"] is None

    def test_not_found_is_distinguished(self, resource: AssistantResource, respond) -> None:
        respond(404)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            resource.read({"id": "gone"})

        assert exc_info.value.operation == "read"

    def test_other_errors_are_not_not_found(self, resource: AssistantResource, respond) -> None:
        respond(502, text="Bad Gateway")

        with pytest.raises(ResourceError) as exc_info:
            resource.read({"id": "abc123"})

        assert not isinstance(exc_info.value, ResourceNotFoundError)
        assert "502" in exc_info.value.detail
        assert "Bad Gateway" in exc_info.value.detail

    def test_default_model_for_system_message_keeps_model_null(
        self, resource: AssistantResource, respond
    ) -> None:
        respond(
            200,
            {
                "id": "a1",
                "name": "Bot",
                "model": {"provider": "openai", "model": "gpt-4o-mini", "systemPrompt": "Hi"},
            },
        )

        state = resource.read({"id": "a1", "name": "Bot", "system_message": "Hi", "model": None})

        assert state["model"] is None
        assert state["system_message"] == "Hi"

    def test_missing_id_is_configuration_error(self, resource: AssistantResource) -> None:
        with pytest.raises(ConfigurationError):
            resource.read({"name": "Bot"})


class TestAssistantUpdate:
    def test_sends_every_present_attribute(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(200, {"id": "a1"})

        state = resource.update(
            {
                "name": "Bot v2",
                "voice": {"provider_type": "playht", "voice_id": "jennifer", "speed": 1.1},
                "client_messages": ["transcript"],
                "background_sound": "off",
            },
            {"id": "a1", "name": "Bot"},
        )

        method, url, body, _ = last_request()
        assert method == "PATCH"
        assert url.endswith("/assistant/a1")
        assert body == {
            "name": "Bot v2",
            "voice": {"provider": "playht", "voiceId": "jennifer", "speed": 1.1},
            "clientMessages": ["transcript"],
            "backgroundSound": "off",
        }
        assert state["id"] == "a1"
        assert state["updated_at"] is None

    def test_explicit_null_clears_field(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(200, {"id": "a1"})
        prior = {
            "id": "a1",
            "name": "Bot",
            "first_message": "Hi",
            "voice": {"provider_type": "playht", "voice_id": "jennifer"},
        }

        resource.update({"name": "Bot", "first_message": None, "voice": None}, prior)

        _, _, body, _ = last_request()
        assert body == {"firstMessage": None, "voice": None}

    def test_null_never_set_is_not_sent(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(200, {"id": "a1"})

        resource.update({"name": "Bot v2", "first_message": None}, {"id": "a1", "name": "Bot"})

        _, _, body, _ = last_request()
        assert body == {"name": "Bot v2"}

    def test_rename_after_create_sends_only_name(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(201, {"id": "a1", "name": "Bot"})
        state = resource.create({"name": "Bot"})

        respond(200, {"id": "a1", "name": "Bot2"})
        new_state = resource.update(dict(state, name="Bot2"), state)

        method, _, body, _ = last_request()
        assert method == "PATCH"
        assert body == {"name": "Bot2"}
        assert new_state["name"] == "Bot2"

    def test_model_change_resends_system_message(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(201, {"id": "a1"})
        state = resource.create(
            {
                "name": "Bot",
                "system_message": "Be brief.",
                "model": {"provider_type": "anthropic", "model": "claude-3-sonnet"},
            }
        )

        respond(200, {"id": "a1"})
        resource.update(dict(state, model=dict(state["model"], temperature=0.9)), state)

        _, _, body, _ = last_request()
        assert body == {
            "model": {
                "provider": "anthropic",
                "model": "claude-3-sonnet",
                "temperature": 0.9,
                "systemPrompt": "Be brief.",
            }
        }

    def test_system_message_change_keeps_configured_model(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(201, {"id": "a1"})
        state = resource.create(
            {
                "name": "Bot",
                "system_message": "Be brief.",
                "model": {"provider_type": "anthropic", "model": "claude-3-sonnet"},
            }
        )

        respond(200, {"id": "a1"})
        resource.update(dict(state, system_message="Be thorough."), state)

        _, _, body, _ = last_request()
        assert body == {
            "model": {
                "provider": "anthropic",
                "model": "claude-3-sonnet",
                "systemPrompt": "Be thorough.",
            }
        }

    def test_clearing_system_message_without_model(
        self, resource: AssistantResource, respond, last_request
    ) -> None:
        respond(200, {"id": "a1"})
        prior = {"id": "a1", "name": "Bot", "system_message": "Hi", "model": None}

        resource.update(dict(prior, system_message=None), prior)

        _, _, body, _ = last_request()
        assert body == {
            "model": {"provider": "openai", "model": "gpt-4o-mini", "systemPrompt": None}
        }

    def test_system_message_update(self, resource: AssistantResource, respond, last_request) -> None:
        respond(200, {"id": "a1"})

        resource.update({"name": "Bot", "system_message": "New prompt"}, {"id": "a1"})

        _, _, body, _ = last_request()
        assert body["model"]["systemPrompt"] == "New prompt"

    def test_update_not_found(self, resource: AssistantResource, respond) -> None:
        respond(404)

        with pytest.raises(ResourceNotFoundError):
            resource.update({"name": "Bot"}, {"id": "a1"})

    def test_update_without_id(self, resource: AssistantResource) -> None:
        with pytest.raises(ConfigurationError, match="Missing Resource Identifier"):
            resource.update({"name": "Bot"}, {})


class TestAssistantDelete:
    @pytest.mark.parametrize("status_code", [200, 204, 404])
    def test_delete_is_idempotent(
        self, resource: AssistantResource, respond, last_request, status_code: int
    ) -> None:
        respond(status_code)

        assert resource.delete({"id": "a1", "name": "Bot"}) is None

        method, url, _, _ = last_request()
        assert method == "DELETE"
        assert url.endswith("/assistant/a1")

    def test_delete_server_error(self, resource: AssistantResource, respond) -> None:
        respond(500, text="boom")

        with pytest.raises(ResourceError, match="Unable to delete assistant"):
            resource.delete({"id": "a1"})

    def test_delete_transport_error(self, resource: AssistantResource, mock_http: MagicMock) -> None:
        mock_http.request.side_effect = httpx.ConnectTimeout("timed out")

        with pytest.raises(ResourceError, match="error making request"):
            resource.delete({"id": "a1"})


class TestAssistantImport:
    def test_import_reads_remote(self, resource: AssistantResource, respond, last_request) -> None:
        respond(200, REMOTE_ASSISTANT)

        state = resource.import_state("abc123")

        _, url, _, _ = last_request()
        assert url.endswith("/assistant/abc123")
        assert state["id"] == "abc123"
        assert state["name"] == "Support Bot"
        assert state["model"]["model"] == "claude-3-sonnet"

    def test_import_requires_id(self, resource: AssistantResource, mock_http: MagicMock) -> None:
        with pytest.raises(ConfigurationError):
            resource.import_state("  ")

        mock_http.request.assert_not_called()
